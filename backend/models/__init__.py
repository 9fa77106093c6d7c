"""Database models."""

from backend.models.position import Position, PositionStatus
from backend.models.supported_asset import SupportedAsset
from backend.models.collateral_pool import CollateralPool
from backend.models.payout import Payout
from backend.models.position_event import PositionEvent
from backend.models.user import User

__all__ = [
    "Position",
    "PositionStatus",
    "SupportedAsset",
    "CollateralPool",
    "Payout",
    "PositionEvent",
    "User",
]
