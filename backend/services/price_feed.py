"""Price feed adapters.

A feed returns the latest raw integer answer for a feed id together with the
number of decimals that answer is expressed in. ``ChainlinkPriceFeed`` reads an
on-chain AggregatorV3 contract; ``StaticPriceFeed`` serves fixed answers for
local runs and tests.
"""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from web3 import Web3
from web3.exceptions import Web3Exception

from backend.engine.errors import PriceUnavailable

logger = logging.getLogger(__name__)

# Minimal AggregatorV3Interface ABI: decimals() and latestRoundData()
AGGREGATOR_V3_ABI = [
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"internalType": "uint8", "name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "latestRoundData",
        "outputs": [
            {"internalType": "uint80", "name": "roundId", "type": "uint80"},
            {"internalType": "int256", "name": "answer", "type": "int256"},
            {"internalType": "uint256", "name": "startedAt", "type": "uint256"},
            {"internalType": "uint256", "name": "updatedAt", "type": "uint256"},
            {"internalType": "uint80", "name": "answeredInRound", "type": "uint80"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


@dataclass(frozen=True)
class RoundData:
    raw_price: int
    timestamp: int
    round_id: int


class PriceFeed(Protocol):
    def latest_price(self, feed_id: str) -> RoundData: ...

    def decimals(self, feed_id: str) -> int: ...


class ChainlinkPriceFeed:
    """Reads Chainlink aggregators over JSON-RPC.

    Unreachable nodes, reverted calls and feed ids that are not contract
    addresses all surface as ``PriceUnavailable``.
    """

    def __init__(self, rpc_url: str | None = None, web3: Web3 | None = None):
        if web3 is None:
            web3 = Web3(Web3.HTTPProvider(rpc_url))
        self.web3 = web3
        self._contracts: dict[str, object] = {}
        self._decimals: dict[str, int] = {}

    def _aggregator(self, feed_id: str):
        contract = self._contracts.get(feed_id)
        if contract is None:
            if not Web3.is_address(feed_id):
                raise PriceUnavailable(f"Feed id {feed_id} is not an aggregator address")
            contract = self.web3.eth.contract(
                address=Web3.to_checksum_address(feed_id),
                abi=AGGREGATOR_V3_ABI,
            )
            self._contracts[feed_id] = contract
        return contract

    def _call(self, feed_id: str, function: str):
        aggregator = self._aggregator(feed_id)
        try:
            return getattr(aggregator.functions, function)().call()
        except (Web3Exception, ValueError, OSError) as e:
            logger.warning(f"Feed {feed_id} {function}() failed: {e}")
            raise PriceUnavailable(f"Feed {feed_id} {function}() failed") from e

    def latest_price(self, feed_id: str) -> RoundData:
        round_id, answer, _started_at, updated_at, _answered_in = self._call(
            feed_id, "latestRoundData"
        )
        logger.debug(f"Feed {feed_id}: answer={answer} round={round_id} updated={updated_at}")
        return RoundData(raw_price=int(answer), timestamp=int(updated_at), round_id=int(round_id))

    def decimals(self, feed_id: str) -> int:
        # Aggregator decimals never change for a deployed feed
        if feed_id not in self._decimals:
            self._decimals[feed_id] = int(self._call(feed_id, "decimals"))
        return self._decimals[feed_id]


class StaticPriceFeed:
    """In-memory feed with settable answers, keyed by feed id."""

    def __init__(self, prices: dict[str, tuple[int, int]] | None = None):
        self._prices: dict[str, tuple[int, int]] = {}
        self._rounds: dict[str, int] = {}
        for feed_id, (raw_price, decimals) in (prices or {}).items():
            self.set_price(feed_id, raw_price, decimals)

    def set_price(self, feed_id: str, raw_price: int, decimals: int):
        self._prices[feed_id] = (int(raw_price), int(decimals))
        self._rounds[feed_id] = self._rounds.get(feed_id, 0) + 1

    def _answer(self, feed_id: str) -> tuple[int, int]:
        if feed_id not in self._prices:
            raise PriceUnavailable(f"No static price for feed {feed_id}")
        return self._prices[feed_id]

    def latest_price(self, feed_id: str) -> RoundData:
        raw_price, _decimals = self._answer(feed_id)
        return RoundData(
            raw_price=raw_price,
            timestamp=int(time.time()),
            round_id=self._rounds[feed_id],
        )

    def decimals(self, feed_id: str) -> int:
        return self._answer(feed_id)[1]


def build_price_feed(settings) -> PriceFeed:
    """Create the feed selected by ``settings.price_feed``."""
    if settings.price_feed == "static":
        prices = {fid: (pair[0], pair[1]) for fid, pair in settings.static_prices.items()}
        logger.info(f"Using static price feed with {len(prices)} feeds")
        return StaticPriceFeed(prices)
    if settings.price_feed == "chainlink":
        logger.info(f"Using Chainlink price feed via {settings.rpc_url}")
        return ChainlinkPriceFeed(rpc_url=settings.rpc_url)
    raise ValueError(f"Unknown price feed: {settings.price_feed}")
