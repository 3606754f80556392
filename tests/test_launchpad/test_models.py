"""
Tests for launchpad models, the clock, the event log and the reentrancy guard.
"""

import asyncio
from datetime import UTC

import pytest

from launchpad.clock import Clock, FixedClock, SystemClock, to_datetime
from launchpad.curve import EventLog
from launchpad.errors import StateError, ValidationError
from launchpad.ledger import InMemoryLedger
from launchpad.models import (
    CurveEventType,
    CurveParameters,
    CurveStatus,
    GraduationFailed,
    GraduationProgress,
    TokensPurchased,
    TradeState,
    new_address,
    validated,
)
from launchpad.trading import ReentrancyGuard

TOKEN = "0x" + "b" * 40


# ==================== Enum Tests ====================


class TestEnums:
    """Tests for status and event enums."""

    def test_curve_status_values(self):
        assert CurveStatus.ACTIVE == "active"
        assert CurveStatus.GRADUATED == "graduated"

    def test_event_types_are_strings(self):
        for event_type in CurveEventType:
            assert isinstance(event_type.value, str)


# ==================== Model Tests ====================


class TestCurveModels:
    """Tests for curve parameter and state models."""

    def test_parameters_default_to_wad(self):
        params = CurveParameters(slope=1, base_price=1, graduation_threshold=1)
        assert params.scale == 10**18

    def test_parameters_are_frozen(self):
        params = CurveParameters(slope=1, base_price=1, graduation_threshold=1)
        with pytest.raises(Exception):
            params.slope = 2

    def test_validated_translates_errors(self):
        with pytest.raises(ValidationError, match="CurveParameters"):
            validated(CurveParameters, slope=-1, base_price=1, graduation_threshold=1)

    def test_trade_state_rejects_negative_raised(self):
        state = TradeState()
        with pytest.raises(Exception):
            state.total_raised = -1

    def test_trade_state_snapshot_restore(self):
        state = TradeState()
        snap = state.snapshot()
        state.total_raised = 500
        state.status = CurveStatus.GRADUATED
        state.pool_address = "0xpool"
        state.restore(snap)
        assert state.total_raised == 0
        assert state.has_graduated is False
        assert state.pool_address is None

    def test_progress_bounds(self):
        with pytest.raises(Exception):
            GraduationProgress(progress_bps=10_001, remaining=0)

    def test_new_address_format(self):
        address = new_address()
        assert address.startswith("0x")
        assert len(address) == 42
        assert address != new_address()


# ==================== Clock Tests ====================


class TestClock:
    """Tests for time sources."""

    def test_fixed_clock_advance(self):
        clock = FixedClock(start=100)
        assert clock.now() == 100
        assert clock.advance(25) == 125

    def test_fixed_clock_cannot_go_back(self):
        with pytest.raises(ValueError):
            FixedClock().advance(-1)

    def test_clocks_satisfy_protocol(self):
        assert isinstance(FixedClock(), Clock)
        assert isinstance(SystemClock(), Clock)

    def test_to_datetime_is_utc(self):
        assert to_datetime(0).tzinfo == UTC


# ==================== EventLog Tests ====================


class TestEventLog:
    """Tests for the per-instance event log."""

    def test_append_and_filter(self):
        log = EventLog()
        log.append(
            TokensPurchased(token_address=TOKEN, buyer="0xb", amount=1, cost=2, new_supply=1)
        )
        log.append(GraduationFailed(token_address=TOKEN, reason="down"))

        assert len(log) == 2
        assert len(log.of_type(CurveEventType.TOKENS_PURCHASED)) == 1
        assert log.last(GraduationFailed).reason == "down"

    def test_restore_drops_later_events(self):
        log = EventLog()
        snap = log.snapshot()
        log.append(GraduationFailed(token_address=TOKEN, reason="down"))
        log.restore(snap)
        assert log.all() == []


# ==================== ReentrancyGuard Tests ====================


class TestReentrancyGuard:
    """Tests for the reentrancy guard."""

    @pytest.mark.asyncio
    async def test_same_task_reentry_rejected(self):
        guard = ReentrancyGuard()
        async with guard.hold("outer"):
            assert guard.operation == "outer"
            with pytest.raises(StateError, match="outer"):
                async with guard.hold("inner"):
                    pass
        assert guard.locked is False

    @pytest.mark.asyncio
    async def test_other_tasks_wait(self):
        guard = ReentrancyGuard()
        order = []

        async def worker(name: str):
            async with guard.hold(name):
                order.append(f"{name}-start")
                await asyncio.sleep(0)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))
        assert order == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_released_after_error(self):
        guard = ReentrancyGuard()
        with pytest.raises(RuntimeError):
            async with guard.hold("op"):
                raise RuntimeError("boom")
        async with guard.hold("op"):
            assert guard.locked is True

    def test_shared_guard_joins_existing_domain(self):
        settlement, venue, other = InMemoryLedger("WETH"), InMemoryLedger("POOL"), InMemoryLedger("OTHER")
        first = ReentrancyGuard.shared(settlement, venue)
        assert ReentrancyGuard.shared(venue, other) is first
        assert ReentrancyGuard.shared(other) is first

    def test_shared_guard_rejects_two_domains(self):
        left, right = InMemoryLedger("LEFT"), InMemoryLedger("RIGHT")
        assert ReentrancyGuard.shared(left) is not ReentrancyGuard.shared(right)
        with pytest.raises(ValidationError, match="lock domains"):
            ReentrancyGuard.shared(left, right)
