"""Pydantic schemas for the positions API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from backend.models.position import PositionStatus


class PositionOpen(BaseModel):
    asset: str = Field(min_length=1, max_length=64)
    deposit: int = Field(gt=0)  # wei

    @field_validator("asset")
    @classmethod
    def _trim_asset(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class PositionRead(BaseModel):
    account: str
    nonce: int
    tracked_asset: str
    entry_price: int
    size: int
    status: PositionStatus
    close_price: int
    opened_at: datetime
    closed_at: datetime | None = None

    model_config = {"from_attributes": True}


class SettlementRead(BaseModel):
    withdrawal_amount: int
    close_price: int
    is_liquidatable: bool

    model_config = {"from_attributes": True}


class ResolutionRead(BaseModel):
    position: PositionRead
    withdrawal_amount: int
    paid_out: int
