"""Tests for the SQLite to PostgreSQL copy, run here between two SQLite databases."""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, select

from backend.models.position import Position, PositionStatus
from backend.utils.constants import LIQUIDATED_CLOSE_PRICE
from scripts.migrate_sqlite_to_pg import MigrationError, copy_tables, verify

E18 = 10**18


@pytest.fixture
def target():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def populated(lifecycle, treasury, prices):
    treasury.fund("lp", 10 * E18)
    lifecycle.open_position("alice", "BTC", E18)
    lifecycle.open_position("alice", "BTC", 2 * E18)
    lifecycle.open_position("bob", "BTC", E18)
    prices.set_price("BTC", 90_000 * E18)
    lifecycle.close_position("alice", 0)
    prices.set_price("BTC", 300_000 * E18)
    lifecycle.liquidate_position("bob", 0)


def _positions(engine):
    with Session(engine) as session:
        return {
            (p.account, p.nonce): (p.status, p.entry_price, p.size, p.close_price)
            for p in session.exec(select(Position))
        }


def test_copy_preserves_positions_and_big_integers(db_engine, target, populated):
    copied = copy_tables(db_engine, target)
    verify(db_engine, target)

    assert copied["position"] == 3
    assert copied["position_event"] == 5
    assert copied["payout"] == 1
    assert _positions(target) == _positions(db_engine)
    status, _, _, close_price = _positions(target)[("bob", 0)]
    assert status is PositionStatus.LIQUIDATED
    assert close_price == LIQUIDATED_CLOSE_PRICE


def test_copy_replaces_existing_target_rows(db_engine, target, populated):
    copy_tables(db_engine, target)
    copy_tables(db_engine, target)
    verify(db_engine, target)
    assert len(_positions(target)) == 3


def test_verify_detects_changed_big_integer(db_engine, target, populated):
    copy_tables(db_engine, target)
    with target.begin() as conn:
        table = Position.__table__
        conn.execute(
            table.update()
            .where(table.c.account == "alice", table.c.nonce == 1)
            .values(size=1)
        )
    with pytest.raises(MigrationError, match="alice#1"):
        verify(db_engine, target)


def test_verify_detects_missing_rows(db_engine, target, populated):
    copy_tables(db_engine, target)
    with target.begin() as conn:
        conn.execute(Position.__table__.delete().where(Position.__table__.c.account == "bob"))
    with pytest.raises(MigrationError, match="position"):
        verify(db_engine, target)
