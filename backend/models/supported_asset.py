"""SupportedAsset model — write-once mapping from asset id to its price feed."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class SupportedAsset(SQLModel, table=True):
    __tablename__ = "supported_asset"

    asset: str = Field(primary_key=True)  # e.g. "BTC"
    feed_id: str  # Chainlink aggregator address, or a static feed key
    registered_by: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
