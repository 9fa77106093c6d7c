"""Price normalization to 18-decimal fixed point, and the price-source capability.

The lifecycle engine only ever asks a ``PriceSource`` for two normalized
prices: the base (settlement) asset and a tracked asset id. Only registered
assets have a tracked price, the base asset included. ``FeedPriceSource`` is the
production adapter (registry lookup plus a ``PriceFeed`` read);
``FixedPriceSource`` is a deterministic stand-in.
"""

import logging
from typing import Callable, Protocol

from backend.engine.errors import (
    ArithmeticOverflow,
    InvalidPrice,
    PriceUnavailable,
    UnsupportedToken,
)
from backend.services.price_feed import PriceFeed
from backend.utils.constants import PRICE_DECIMALS, UINT256_MAX

logger = logging.getLogger(__name__)


def normalize(raw_price: int, decimals: int) -> int:
    """Rescale a raw feed answer with ``decimals`` places to 18 decimals.

    Scaling down floors, so feeds with more than 18 decimals lose precision.
    """
    if raw_price <= 0:
        raise InvalidPrice(f"Price must be positive, got {raw_price}")
    if decimals < 0:
        raise InvalidPrice(f"Decimals must be non-negative, got {decimals}")

    if decimals < PRICE_DECIMALS:
        normalized = raw_price * 10 ** (PRICE_DECIMALS - decimals)
    elif decimals > PRICE_DECIMALS:
        normalized = raw_price // 10 ** (decimals - PRICE_DECIMALS)
    else:
        normalized = raw_price

    if normalized > UINT256_MAX:
        raise ArithmeticOverflow(f"Normalized price {raw_price}e-{decimals} exceeds uint256")
    return normalized


def read_normalized_price(feed: PriceFeed, feed_id: str) -> int:
    """Read the latest answer of ``feed_id`` and normalize it."""
    round_data = feed.latest_price(feed_id)
    return normalize(round_data.raw_price, feed.decimals(feed_id))


class PriceSource(Protocol):
    def base_price(self) -> int: ...

    def normalized_price(self, asset: str) -> int: ...


class FeedPriceSource:
    """Reads the base asset from its configured feed and tracked assets from
    the feed their registry entry names."""

    def __init__(
        self,
        resolve_feed: Callable[[str], str | None],
        feed: PriceFeed,
        base_feed_id: str,
    ):
        self.resolve_feed = resolve_feed
        self.feed = feed
        self.base_feed_id = base_feed_id

    def base_price(self) -> int:
        return read_normalized_price(self.feed, self.base_feed_id)

    def normalized_price(self, asset: str) -> int:
        feed_id = self.resolve_feed(asset)
        if not feed_id:
            raise UnsupportedToken(f"Asset {asset} is not supported")
        price = read_normalized_price(self.feed, feed_id)
        logger.debug(f"Price {asset} via {feed_id}: {price}")
        return price


class FixedPriceSource:
    """Deterministic prices, already normalized: a base price plus tracked
    prices keyed by asset id."""

    def __init__(self, prices: dict[str, int] | None = None, base: int | None = None):
        self.prices: dict[str, int] = dict(prices or {})
        self.base = base

    def set_price(self, asset: str, normalized_price: int):
        self.prices[asset] = normalized_price

    def set_base_price(self, normalized_price: int):
        self.base = normalized_price

    def base_price(self) -> int:
        if self.base is None:
            raise PriceUnavailable("No base price set")
        return _positive(self.base)

    def normalized_price(self, asset: str) -> int:
        if asset not in self.prices:
            raise UnsupportedToken(f"Asset {asset} is not supported")
        return _positive(self.prices[asset])


def _positive(price: int) -> int:
    if price <= 0:
        raise InvalidPrice(f"Price must be positive, got {price}")
    return price
