"""Positions API — open, close, liquidate and inspect short positions.

The authenticated username is the account identity: a caller opens and closes
positions in their own ledger, and may liquidate any account's position.
"""

import logging

from fastapi import APIRouter, Depends

from backend.api.deps import get_current_user, get_engine
from backend.engine.lifecycle import PositionLifecycleEngine, Resolution
from backend.models.user import User
from backend.schemas.position import (
    PositionOpen,
    PositionRead,
    ResolutionRead,
    SettlementRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/positions", tags=["positions"], dependencies=[Depends(get_current_user)])


def _resolution(resolution: Resolution) -> ResolutionRead:
    return ResolutionRead(
        position=PositionRead.model_validate(resolution.position),
        withdrawal_amount=resolution.settlement.withdrawal_amount,
        paid_out=resolution.paid_out,
    )


@router.get("", response_model=list[PositionRead])
def list_positions(
    user: User = Depends(get_current_user),
    engine: PositionLifecycleEngine = Depends(get_engine),
):
    return engine.ledger.positions(user.username)


@router.post("", response_model=PositionRead, status_code=201)
def open_position(
    data: PositionOpen,
    user: User = Depends(get_current_user),
    engine: PositionLifecycleEngine = Depends(get_engine),
):
    """Open a short on ``asset`` with ``deposit`` wei of collateral."""
    return engine.open_position(user.username, data.asset, data.deposit)


@router.post("/{nonce}/close", response_model=ResolutionRead)
def close_position(
    nonce: int,
    user: User = Depends(get_current_user),
    engine: PositionLifecycleEngine = Depends(get_engine),
):
    """Close one of the caller's own positions."""
    return _resolution(engine.close_position(user.username, nonce))


@router.post("/{account}/{nonce}/liquidate", response_model=ResolutionRead)
def liquidate_position(
    account: str,
    nonce: int,
    engine: PositionLifecycleEngine = Depends(get_engine),
):
    """Liquidate any account's position that settles at or below zero."""
    return _resolution(engine.liquidate_position(account, nonce))


@router.get("/{account}/{nonce}", response_model=PositionRead)
def get_position(
    account: str,
    nonce: int,
    engine: PositionLifecycleEngine = Depends(get_engine),
):
    return engine.get_position(account, nonce)


@router.get("/{account}/{nonce}/quote", response_model=SettlementRead)
def quote_position(
    account: str,
    nonce: int,
    engine: PositionLifecycleEngine = Depends(get_engine),
):
    """Settlement the position would get at current prices."""
    settlement = engine.quote(account, nonce)
    return SettlementRead(
        withdrawal_amount=settlement.withdrawal_amount,
        close_price=settlement.close_price,
        is_liquidatable=settlement.is_liquidatable,
    )
