"""Per-account, append-only position ledger.

Each account owns a contiguous index space starting at 0; a position's nonce is
its index at append time and never changes. Positions are never deleted.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func

from backend.engine.errors import InvalidNonce, NonceConflict, NotOpen
from backend.models.position import Position, PositionStatus, STATUS_TRANSITIONS

logger = logging.getLogger(__name__)


class PositionLedger:
    def __init__(self, session: Session):
        self.session = session

    def count(self, account: str) -> int:
        stmt = select(func.count()).select_from(Position).where(Position.account == account)
        return self.session.exec(stmt).one()

    def append(self, account: str, position: Position) -> int:
        """Add ``position`` at the end of the account's sequence and return its nonce."""
        nonce = self.count(account)
        position.account = account
        position.nonce = nonce
        self.session.add(position)
        try:
            self.session.flush()
        except IntegrityError as e:
            # (account, nonce) is unique; a concurrent writer in another process got here first
            raise NonceConflict(f"Nonce {nonce} for {account} was taken concurrently, retry") from e
        return nonce

    def get(self, account: str, nonce: int) -> Position:
        if nonce < 0:
            raise InvalidNonce(f"Invalid nonce {nonce} for {account}")
        position = self.session.exec(
            select(Position).where(Position.account == account, Position.nonce == nonce)
        ).first()
        if position is None:
            raise InvalidNonce(f"Invalid nonce {nonce} for {account}")
        return position

    def positions(self, account: str) -> list[Position]:
        stmt = select(Position).where(Position.account == account).order_by(Position.nonce)
        return list(self.session.exec(stmt).all())

    def set_terminal(
        self,
        account: str,
        nonce: int,
        status: PositionStatus,
        close_price: int,
    ) -> Position:
        """Write the one terminal transition of an open position."""
        position = self.get(account, nonce)
        if status not in STATUS_TRANSITIONS[position.status]:
            if position.status is not PositionStatus.OPEN:
                raise NotOpen(f"Position {account}/{nonce} is {position.status.value}")
            raise ValueError(f"{status.value} is not a terminal status")

        position.status = status
        position.close_price = close_price
        position.closed_at = datetime.now(timezone.utc)
        self.session.add(position)
        self.session.flush()
        return position
