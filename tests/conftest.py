"""Shared fixtures: in-memory database, deterministic prices, engine factory."""

import os

# Must be set before any backend import reads settings.
os.environ.setdefault("SV_DATABASE_URL", "sqlite://")
os.environ.setdefault("SV_PRICE_FEED", "static")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from backend.database import create_db_and_tables
from backend.engine.guard import ReentrancyGuard
from backend.engine.lifecycle import PositionLifecycleEngine
from backend.engine.treasury import Treasury
from backend.models.user import User
from backend.services.price_normalizer import FixedPriceSource
from backend.services.transfer import PayoutLedgerTransfer

E18 = 10**18
MIN_DEPOSIT = 10**15


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def prices():
    return FixedPriceSource({"BTC": 100000 * E18}, base=3000 * E18)


@pytest.fixture
def guard():
    return ReentrancyGuard()


@pytest.fixture
def make_lifecycle(session, prices, guard):
    def _make(transfer=None, price_source=None):
        return PositionLifecycleEngine(
            session,
            price_source or prices,
            transfer or PayoutLedgerTransfer(session),
            min_deposit=MIN_DEPOSIT,
            guard=guard,
        )
    return _make


@pytest.fixture
def lifecycle(make_lifecycle):
    return make_lifecycle()


@pytest.fixture
def treasury(session, guard):
    return Treasury(session, PayoutLedgerTransfer(session), guard=guard)


@pytest.fixture
def owner():
    return User(username="owner", hashed_password="x", totp_secret="x", is_admin=True)


@pytest.fixture
def stranger():
    return User(username="mallory", hashed_password="x", totp_secret="x")
