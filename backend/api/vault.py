"""Collateral pool API — balance, funding and owner withdrawal."""

from fastapi import APIRouter, Depends

from backend.api.deps import get_current_user, get_treasury
from backend.config import settings
from backend.engine.treasury import Treasury
from backend.models.user import User
from backend.schemas.vault import FundRequest, VaultRead, WithdrawRequest

router = APIRouter(prefix="/api/vault", tags=["vault"], dependencies=[Depends(get_current_user)])


def _vault(balance: int) -> VaultRead:
    return VaultRead(
        balance=balance,
        base_asset=settings.base_asset,
        min_deposit=settings.min_deposit,
    )


@router.get("", response_model=VaultRead)
def vault_status(treasury: Treasury = Depends(get_treasury)):
    return _vault(treasury.balance())


@router.post("/fund", response_model=VaultRead)
def fund_vault(
    body: FundRequest,
    user: User = Depends(get_current_user),
    treasury: Treasury = Depends(get_treasury),
):
    return _vault(treasury.fund(user.username, body.amount))


@router.post("/withdraw", response_model=VaultRead)
def withdraw_from_vault(
    body: WithdrawRequest,
    user: User = Depends(get_current_user),
    treasury: Treasury = Depends(get_treasury),
):
    """Send pooled collateral to ``recipient``. Owner only."""
    return _vault(treasury.withdraw(user, body.recipient, body.amount))
