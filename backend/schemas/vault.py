"""Pydantic schemas for the collateral pool API."""

from pydantic import BaseModel, Field


class FundRequest(BaseModel):
    amount: int = Field(gt=0)  # wei


class WithdrawRequest(BaseModel):
    recipient: str = Field(min_length=1, max_length=128)
    amount: int = Field(gt=0)  # wei


class VaultRead(BaseModel):
    balance: int
    base_asset: str
    min_deposit: int
