"""Position lifecycle: open, close and liquidate.

    open ──close (withdrawal > 0)────────────▶ closed
      │
      ├──close (withdrawal <= 0)─────────────▶ liquidated
      └──liquidate (withdrawal <= 0, anyone)─▶ liquidated

Each operation runs inside ``guarded_transaction``: every precondition is
checked before the first write, and any failure rolls the session back, so the
ledger, the pool, the event log and the payout records change together or not
at all. On a paying close, the terminal status, pool debit and Close event are
flushed before the collateral transfer is attempted.
"""

import logging
from dataclasses import dataclass

from sqlmodel import Session

from backend.config import settings
from backend.engine.errors import (
    ArithmeticOverflow,
    InvalidSize,
    NotEligible,
    NotOpen,
    TooSmall,
    TransferFailed,
)
from backend.engine.guard import ReentrancyGuard, guarded_transaction, vault_guard
from backend.models.position import Position, PositionStatus
from backend.models.position_event import PositionEvent
from backend.services import collateral_pool
from backend.services.ledger import PositionLedger
from backend.services.price_normalizer import PriceSource
from backend.services.settlement import Settlement, settle
from backend.services.transfer import CollateralTransfer
from backend.utils.constants import LIQUIDATED_CLOSE_PRICE, UINT256_MAX

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Outcome of a close or liquidation."""

    position: Position
    settlement: Settlement
    paid_out: int = 0


class PositionLifecycleEngine:
    def __init__(
        self,
        session: Session,
        prices: PriceSource,
        transfer: CollateralTransfer,
        min_deposit: int | None = None,
        guard: ReentrancyGuard | None = None,
    ):
        self.session = session
        self.prices = prices
        self.transfer = transfer
        self.min_deposit = settings.min_deposit if min_deposit is None else min_deposit
        self.guard = guard or vault_guard
        self.ledger = PositionLedger(session)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def open_position(self, account: str, asset: str, deposit: int) -> Position:
        """Open a short on ``asset`` backed by ``deposit`` wei; returns the new position."""
        with guarded_transaction(self.session, self.guard, "open"):
            if deposit <= self.min_deposit:
                raise TooSmall(f"Deposit {deposit} must exceed {self.min_deposit}")

            base_price, entry_price = self._price_pair(asset)
            size = deposit * base_price // entry_price
            if size == 0:
                raise InvalidSize(
                    f"Deposit {deposit} at {base_price}/{entry_price} yields zero size"
                )
            if size > UINT256_MAX:
                raise ArithmeticOverflow(f"Position size {size} overflows uint256")

            collateral_pool.credit(self.session, deposit)
            position = Position(tracked_asset=asset, entry_price=entry_price, size=size)
            nonce = self.ledger.append(account, position)
            self._emit("open", account, nonce, {
                "asset": asset,
                "entry_price": str(entry_price),
                "size": str(size),
            })

        logger.info(
            f"[open] {account}#{nonce} {asset} deposit={deposit} "
            f"entry={entry_price} size={size}"
        )
        return position

    def close_position(self, account: str, nonce: int) -> Resolution:
        """Settle the caller's own position, paying out if it is in profit.

        A non-positive settlement resolves the position as a liquidation.
        """
        with guarded_transaction(self.session, self.guard, "close"):
            position = self._open_position(account, nonce)
            settlement = self._settle(position)
            amount = settlement.withdrawal_amount

            if amount > 0:
                collateral_pool.require_available(self.session, amount)
                self.ledger.set_terminal(
                    account, nonce, PositionStatus.CLOSED, settlement.close_price
                )
                collateral_pool.debit(self.session, amount)
                self._emit("close", account, nonce, {
                    "close_price": str(settlement.close_price),
                    "amount": str(amount),
                })
                if not self.transfer.send(account, amount, "close"):
                    raise TransferFailed(f"Transfer of {amount} wei to {account} failed")
                resolution = Resolution(position, settlement, paid_out=amount)
            else:
                self._liquidate(account, nonce)
                resolution = Resolution(position, settlement)

        logger.info(
            f"[close] {account}#{nonce} -> {position.status.value} "
            f"withdrawal={amount} price={settlement.close_price}"
        )
        return resolution

    def liquidate_position(self, account: str, nonce: int) -> Resolution:
        """Liquidate any account's position whose settlement is at or below zero."""
        with guarded_transaction(self.session, self.guard, "liquidate"):
            position = self._open_position(account, nonce)
            settlement = self._settle(position)
            if not settlement.is_liquidatable:
                raise NotEligible(
                    f"Position {account}#{nonce} would withdraw "
                    f"{settlement.withdrawal_amount}; not eligible for liquidation"
                )
            self._liquidate(account, nonce)

        logger.info(
            f"[liquidate] {account}#{nonce} withdrawal={settlement.withdrawal_amount}"
        )
        return Resolution(position, settlement)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_position(self, account: str, nonce: int) -> Position:
        return self.ledger.get(account, nonce)

    def quote(self, account: str, nonce: int) -> Settlement:
        """Current settlement of a position, without changing anything."""
        return self._settle(self.ledger.get(account, nonce))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _price_pair(self, asset: str) -> tuple[int, int]:
        base_price = self.prices.base_price()
        tracked_price = self.prices.normalized_price(asset)
        return base_price, tracked_price

    def _open_position(self, account: str, nonce: int) -> Position:
        position = self.ledger.get(account, nonce)
        if position.status is not PositionStatus.OPEN:
            raise NotOpen(f"Position {account}#{nonce} is {position.status.value}")
        return position

    def _settle(self, position: Position) -> Settlement:
        base_price, tracked_price = self._price_pair(position.tracked_asset)
        return settle(position, base_price, tracked_price)

    def _liquidate(self, account: str, nonce: int):
        self.ledger.set_terminal(
            account, nonce, PositionStatus.LIQUIDATED, LIQUIDATED_CLOSE_PRICE
        )
        self._emit("liquidation", account, nonce, {})

    def _emit(self, kind: str, account: str, nonce: int, fields: dict):
        data = {"account": account, "nonce": nonce, **fields}
        self.session.add(PositionEvent(kind=kind, account=account, nonce=nonce, data=data))
        self.session.flush()
