"""Pooled collateral balance.

Every change goes through ``adjust``, which refuses to leave the balance
negative. Callers own the transaction; nothing here commits.
"""

import logging
from datetime import datetime, timezone

from sqlmodel import Session

from backend.engine.errors import ArithmeticOverflow, InsufficientBalance
from backend.models.collateral_pool import CollateralPool, POOL_ID
from backend.utils.constants import UINT256_MAX

logger = logging.getLogger(__name__)


def _get_pool(session: Session) -> CollateralPool:
    pool = session.get(CollateralPool, POOL_ID)
    if pool is None:
        pool = CollateralPool(id=POOL_ID, balance=0)
        session.add(pool)
        session.flush()
    return pool


def balance(session: Session) -> int:
    return _get_pool(session).balance


def adjust(session: Session, delta: int) -> int:
    """Apply ``delta`` wei to the pool and return the new balance."""
    pool = _get_pool(session)
    new_balance = pool.balance + delta
    if new_balance < 0:
        raise InsufficientBalance(
            f"Pool holds {pool.balance} wei, cannot release {-delta}"
        )
    if new_balance > UINT256_MAX:
        raise ArithmeticOverflow("Pool balance overflows uint256")
    pool.balance = new_balance
    pool.updated_at = datetime.now(timezone.utc)
    session.add(pool)
    session.flush()
    return new_balance


def credit(session: Session, amount: int) -> int:
    return adjust(session, amount)


def debit(session: Session, amount: int) -> int:
    return adjust(session, -amount)


def require_available(session: Session, amount: int):
    """Fail with InsufficientBalance unless the pool holds at least ``amount``."""
    current = balance(session)
    if current < amount:
        raise InsufficientBalance(f"Pool holds {current} wei, payout needs {amount}")
