"""PositionEvent model — append-only log of open/close/liquidation notifications."""

from datetime import datetime, timezone
from typing import Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON


class PositionEvent(SQLModel, table=True):
    __tablename__ = "position_event"

    id: int | None = Field(default=None, primary_key=True)
    kind: str = Field(index=True)  # "open", "close", "liquidation"
    account: str = Field(index=True)
    nonce: int
    # Event fields in emission order; big integers are kept as decimal strings
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
