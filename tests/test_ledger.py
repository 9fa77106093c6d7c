"""Tests for the append-only position ledger and the status transition table."""

import pytest

from backend.engine.errors import InvalidNonce, NonceConflict, NotOpen
from backend.models.position import Position, PositionStatus, STATUS_TRANSITIONS
from backend.services.ledger import PositionLedger
from backend.utils.constants import LIQUIDATED_CLOSE_PRICE


def _new(asset="BTC"):
    return Position(tracked_asset=asset, entry_price=10**23, size=3 * 10**16)


def test_transition_table_covers_every_status():
    assert set(STATUS_TRANSITIONS) == set(PositionStatus)
    assert STATUS_TRANSITIONS[PositionStatus.CLOSED] == frozenset()
    assert STATUS_TRANSITIONS[PositionStatus.LIQUIDATED] == frozenset()


class TestAppend:
    def test_nonces_are_sequential_per_account(self, session):
        ledger = PositionLedger(session)
        assert ledger.append("alice", _new()) == 0
        assert ledger.append("alice", _new()) == 1
        assert ledger.append("bob", _new()) == 0
        assert ledger.append("alice", _new()) == 2
        assert ledger.count("alice") == 3
        assert ledger.count("bob") == 1

    def test_big_integers_round_trip(self, session):
        ledger = PositionLedger(session)
        ledger.append("alice", _new())
        session.commit()
        session.expire_all()
        pos = ledger.get("alice", 0)
        assert pos.entry_price == 10**23
        assert pos.size == 3 * 10**16
        assert pos.status is PositionStatus.OPEN
        assert pos.close_price == 0

    def test_positions_listed_in_nonce_order(self, session):
        ledger = PositionLedger(session)
        for asset in ("BTC", "SOL", "ETH"):
            ledger.append("alice", _new(asset))
        assert [p.tracked_asset for p in ledger.positions("alice")] == ["BTC", "SOL", "ETH"]

    def test_taken_nonce_is_a_retryable_conflict(self, session, monkeypatch):
        ledger = PositionLedger(session)
        ledger.append("alice", _new())
        session.commit()
        # Another process appended after this one counted
        monkeypatch.setattr(ledger, "count", lambda account: 0)
        with pytest.raises(NonceConflict):
            ledger.append("alice", _new("SOL"))
        session.rollback()
        assert [p.tracked_asset for p in ledger.positions("alice")] == ["BTC"]


class TestGet:
    def test_nonce_past_end_is_invalid(self, session):
        ledger = PositionLedger(session)
        ledger.append("alice", _new())
        with pytest.raises(InvalidNonce):
            ledger.get("alice", 1)

    def test_negative_nonce_is_invalid(self, session):
        with pytest.raises(InvalidNonce):
            PositionLedger(session).get("alice", -1)

    def test_other_accounts_positions_not_visible(self, session):
        ledger = PositionLedger(session)
        ledger.append("alice", _new())
        with pytest.raises(InvalidNonce):
            ledger.get("bob", 0)


class TestSetTerminal:
    def test_close_records_price(self, session):
        ledger = PositionLedger(session)
        ledger.append("alice", _new())
        pos = ledger.set_terminal("alice", 0, PositionStatus.CLOSED, 9 * 10**22)
        assert pos.status is PositionStatus.CLOSED
        assert pos.close_price == 9 * 10**22
        assert pos.closed_at is not None

    def test_terminal_positions_are_frozen(self, session):
        ledger = PositionLedger(session)
        ledger.append("alice", _new())
        ledger.set_terminal("alice", 0, PositionStatus.LIQUIDATED, LIQUIDATED_CLOSE_PRICE)
        with pytest.raises(NotOpen):
            ledger.set_terminal("alice", 0, PositionStatus.CLOSED, 1)
        with pytest.raises(NotOpen):
            ledger.set_terminal("alice", 0, PositionStatus.LIQUIDATED, LIQUIDATED_CLOSE_PRICE)
        assert ledger.get("alice", 0).close_price == LIQUIDATED_CLOSE_PRICE

    def test_open_is_not_a_terminal_status(self, session):
        ledger = PositionLedger(session)
        ledger.append("alice", _new())
        with pytest.raises(ValueError):
            ledger.set_terminal("alice", 0, PositionStatus.OPEN, 0)
