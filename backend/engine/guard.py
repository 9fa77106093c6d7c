"""Reentrancy guard and transactional scope for state-mutating operations.

A guarded operation that calls back into another guarded operation on the same
thread fails with ReentrantCall. Operations from other threads queue behind the
current one, so the vault processes one transaction at a time.
"""

import logging
import threading
from contextlib import contextmanager

from sqlmodel import Session

from backend.engine.errors import ReentrantCall

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    def __init__(self):
        self._lock = threading.Lock()
        self._owner: int | None = None
        self._operation: str | None = None

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def enter(self, operation: str):
        me = threading.get_ident()
        if self._owner == me:
            raise ReentrantCall(f"{operation} called while {self._operation} is in progress")

        with self._lock:
            self._owner = me
            self._operation = operation
            try:
                yield
            finally:
                self._owner = None
                self._operation = None


# Shared by every engine instance in the process
vault_guard = ReentrancyGuard()


@contextmanager
def guarded_transaction(session: Session, guard: ReentrancyGuard, operation: str):
    """Run the body under ``guard``; commit on success, roll back on any error."""
    with guard.enter(operation):
        try:
            yield
            session.commit()
        except Exception:
            session.rollback()
            raise
