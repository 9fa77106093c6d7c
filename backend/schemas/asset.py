"""Pydantic schemas for the supported-asset registry API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class AssetCreate(BaseModel):
    asset: str = Field(min_length=1, max_length=64)
    feed_id: str = Field(min_length=1, max_length=128)

    @field_validator("asset", "feed_id")
    @classmethod
    def _trim_required_text(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class AssetRead(BaseModel):
    asset: str
    feed_id: str
    registered_by: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
