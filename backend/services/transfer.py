"""Native-currency transfer out of the pool.

The engine calls ``send`` after it has finalized ledger and pool state; a
``False`` return fails the whole operation with TransferFailed.
"""

import logging
from typing import Protocol

from sqlmodel import Session

from backend.models.payout import Payout

logger = logging.getLogger(__name__)


class CollateralTransfer(Protocol):
    def send(self, account: str, amount: int, reason: str) -> bool: ...


class PayoutLedgerTransfer:
    """Records each transfer as a Payout row inside the caller's transaction."""

    def __init__(self, session: Session):
        self.session = session

    def send(self, account: str, amount: int, reason: str) -> bool:
        if amount <= 0:
            logger.warning(f"Refusing non-positive transfer of {amount} to {account}")
            return False
        self.session.add(Payout(account=account, amount=amount, reason=reason))
        self.session.flush()
        logger.info(f"Payout {amount} wei to {account} ({reason})")
        return True
