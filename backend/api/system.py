"""System API — health check and the position event log."""

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from backend.database import get_session
from backend.models.position_event import PositionEvent
from backend.api.deps import get_current_user

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/events", dependencies=[Depends(get_current_user)])
def position_events(
    account: str | None = None,
    kind: str | None = None,
    limit: int = 100,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    """Open/close/liquidation notifications, oldest first."""
    stmt = select(PositionEvent).order_by(PositionEvent.id)
    if account is not None:
        stmt = stmt.where(PositionEvent.account == account)
    if kind is not None:
        stmt = stmt.where(PositionEvent.kind == kind)
    stmt = stmt.offset(offset).limit(limit)
    return session.exec(stmt).all()
