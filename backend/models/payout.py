"""Payout model — immutable record of every native transfer out of the pool."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Column

from backend.models.types import IntText


class Payout(SQLModel, table=True):
    __tablename__ = "payout"

    id: int | None = Field(default=None, primary_key=True)
    account: str = Field(index=True)
    amount: int = Field(sa_column=Column(IntText, nullable=False))  # wei
    reason: str  # "close", "withdraw"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
