"""Supported-asset registry API."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from backend.api.deps import get_current_user, get_treasury
from backend.database import get_session
from backend.engine.treasury import Treasury
from backend.models.supported_asset import SupportedAsset
from backend.models.user import User
from backend.schemas.asset import AssetCreate, AssetRead
from backend.services import registry

router = APIRouter(prefix="/api/assets", tags=["assets"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[AssetRead])
def list_assets(session: Session = Depends(get_session)):
    return registry.list_assets(session)


@router.post("", response_model=AssetRead, status_code=201)
def register_asset(
    data: AssetCreate,
    user: User = Depends(get_current_user),
    treasury: Treasury = Depends(get_treasury),
):
    """Register a price feed for an asset. Owner only; entries are write-once."""
    return treasury.register_asset(user, data.asset, data.feed_id)


@router.get("/{asset}", response_model=AssetRead)
def get_asset(asset: str, session: Session = Depends(get_session)):
    row = session.get(SupportedAsset, asset)
    if not row:
        raise HTTPException(status_code=404, detail="Asset not supported")
    return row
