"""Position model — one leveraged short exposure, addressed by (account, nonce)."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Column

from backend.models.types import IntText


class PositionStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    LIQUIDATED = "liquidated"


# Allowed terminal writes per status. Every member must appear here.
STATUS_TRANSITIONS: dict[PositionStatus, frozenset[PositionStatus]] = {
    PositionStatus.OPEN: frozenset({PositionStatus.CLOSED, PositionStatus.LIQUIDATED}),
    PositionStatus.CLOSED: frozenset(),
    PositionStatus.LIQUIDATED: frozenset(),
}


class Position(SQLModel, table=True):
    __tablename__ = "position"
    __table_args__ = (
        UniqueConstraint("account", "nonce", name="uq_position_account_nonce"),
    )

    id: int | None = Field(default=None, primary_key=True)
    account: str = Field(index=True)
    nonce: int  # zero-based index within the account's history
    tracked_asset: str
    entry_price: int = Field(sa_column=Column(IntText, nullable=False))  # 18-decimal
    size: int = Field(sa_column=Column(IntText, nullable=False))
    status: PositionStatus = PositionStatus.OPEN
    close_price: int = Field(default=0, sa_column=Column(IntText, nullable=False))
    opened_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    closed_at: datetime | None = None
