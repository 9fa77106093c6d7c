"""CollateralPool model — the single pooled native-currency balance."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Column

from backend.models.types import IntText

POOL_ID = 1


class CollateralPool(SQLModel, table=True):
    __tablename__ = "collateral_pool"

    id: int = Field(default=POOL_ID, primary_key=True)
    balance: int = Field(default=0, sa_column=Column(IntText, nullable=False))  # wei
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
