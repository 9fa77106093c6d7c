"""Shared API dependencies."""

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session, select

from backend.config import settings
from backend.database import get_session
from backend.engine.lifecycle import PositionLifecycleEngine
from backend.engine.treasury import Treasury
from backend.models.user import User
from backend.services import registry
from backend.services.auth import decode_access_token
from backend.services.price_feed import PriceFeed, build_price_feed
from backend.services.price_normalizer import FeedPriceSource, PriceSource
from backend.services.transfer import PayoutLedgerTransfer

bearer_scheme = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """Validate JWT and return the current user."""
    username = decode_access_token(credentials.credentials)
    if username is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    user = session.exec(select(User).where(User.username == username)).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    return user


@lru_cache
def get_price_feed() -> PriceFeed:
    """Process-wide price feed (keeps aggregator contracts cached)."""
    return build_price_feed(settings)


def get_price_source(
    session: Session = Depends(get_session),
    feed: PriceFeed = Depends(get_price_feed),
) -> PriceSource:
    return FeedPriceSource(
        lambda asset: registry.resolve_feed(session, asset),
        feed,
        base_feed_id=settings.base_feed_id,
    )


def get_engine(
    session: Session = Depends(get_session),
    prices: PriceSource = Depends(get_price_source),
) -> PositionLifecycleEngine:
    return PositionLifecycleEngine(session, prices, PayoutLedgerTransfer(session))


def get_treasury(session: Session = Depends(get_session)) -> Treasury:
    return Treasury(session, PayoutLedgerTransfer(session))
