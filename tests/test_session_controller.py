"""
Unit tests for the session controller.

Tests cover:
- idle -> tracking -> idle state machine
- Duplicate start/stop calls
- Reset in either state
- Result serialization
- Live snapshot timer
- Independent controllers
"""

import asyncio

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoring import FrictionLevel
from session import LiveSnapshotTimer, SessionController, SessionResult, SessionState


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def _correction(controller, target, start):
    controller.dispatch({'kind': 'hover_enter', 'target_id': target, 'timestamp_ms': start})
    controller.dispatch({'kind': 'hover_leave', 'target_id': target, 'timestamp_ms': start + 500})


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def controller(clock):
    return SessionController(age_group='9-11', clock=clock)


class TestStateMachine:
    """Test lifecycle transitions."""

    def test_initial_state(self, controller):
        assert controller.state == SessionState.IDLE
        assert controller.last_result is None

    def test_start_and_stop(self, controller, clock):
        assert controller.start('task') is True
        assert controller.state == SessionState.TRACKING

        clock.now = 6000.0
        result = controller.stop()

        assert controller.state == SessionState.IDLE
        assert result.is_final
        assert result.session_duration_ms == 5000.0
        assert result.completed_at_ms == 6000.0
        assert controller.last_result is result

    def test_start_while_tracking_is_noop(self, controller, clock):
        controller.start()
        controller.dispatch({'kind': 'click', 'timestamp_ms': 1100})

        clock.now = 2000.0
        assert controller.start() is False
        assert controller.capture.session_start_ms == 1000.0
        assert len(controller.capture.buffers.clicks) == 1

    def test_stop_while_idle_returns_last_result(self, controller):
        controller.start()
        first = controller.stop()
        assert controller.stop() is first

    def test_stop_before_any_start(self, controller):
        result = controller.stop()
        assert isinstance(result, SessionResult)
        assert not result.is_final
        assert result.friction_level == FrictionLevel.LOW
        assert controller.state == SessionState.IDLE

    def test_events_after_stop_do_not_change_result(self, controller):
        controller.start()
        result = controller.stop()

        assert controller.dispatch({'kind': 'click', 'timestamp_ms': 5000}) is False
        assert controller.stop() is result
        assert controller.capture.buffers.is_empty

    def test_restart_starts_fresh(self, controller, clock):
        controller.start()
        for i in range(8):
            _correction(controller, f'opt-{i}', 1000 + i * 1000)
        assert controller.stop().metrics.correction_count == 8

        clock.now = 20000.0
        controller.start()
        assert controller.last_result is None
        result = controller.stop()
        assert result.metrics.correction_count == 0
        assert result.friction_level == FrictionLevel.LOW

    def test_explicit_timestamps(self, controller):
        controller.start(timestamp_ms=0)
        result = controller.stop(timestamp_ms=42000)
        assert result.session_duration_ms == 42000
        assert result.completed_at_ms == 42000

    def test_stop_after_extreme_coordinates(self, controller):
        controller.start(timestamp_ms=0)
        controller.dispatch({'kind': 'move', 'x': 0, 'y': 0, 'timestamp_ms': 0})
        controller.dispatch({'kind': 'move', 'x': float('inf'), 'y': 0, 'timestamp_ms': 10})
        controller.dispatch({'kind': 'move', 'x': 1e308, 'y': 0, 'timestamp_ms': 20})
        controller.dispatch({'kind': 'move', 'x': 1e308, 'y': 0, 'timestamp_ms': 30})

        result = controller.stop(timestamp_ms=100)

        assert controller.state == SessionState.IDLE
        assert result.is_final
        assert result.metrics.speed_variance == 1.0
        assert controller.stop() is result


class TestReset:
    """Test reset in either state."""

    def test_reset_while_tracking(self, controller):
        controller.start()
        _correction(controller, 'opt-a', 1100)
        controller.reset()

        assert controller.state == SessionState.TRACKING
        assert controller.capture.buffers.is_empty

    def test_reset_while_idle_clears_cached_result(self, controller):
        controller.start()
        controller.stop()
        controller.reset()

        assert controller.state == SessionState.IDLE
        assert controller.last_result is None


class TestResults:
    """Test scoring through the controller."""

    def test_excess_corrections_scenario(self, controller, clock):
        controller.start()
        for i in range(8):
            _correction(controller, f'opt-{i}', 1000 + i * 1000)
        result = controller.stop()

        assert result.raw_counts.correction_count == 8
        assert result.raw_counts.hover_count == 8
        assert result.deviations.corrections == 3.0
        assert result.friction_level == FrictionLevel.HIGH
        assert any('8 instances' in d for d in result.explanation.details)

    def test_live_snapshot_matches_final(self, controller):
        controller.start()
        _correction(controller, 'opt-a', 1100)
        live = controller.live_snapshot()
        final = controller.stop()

        assert not live.is_final
        assert live.completed_at_ms is None
        assert live.metrics == final.metrics
        assert live.deviations == final.deviations
        assert live.friction_level == final.friction_level

    def test_live_snapshot_leaves_buffers(self, controller):
        controller.start()
        _correction(controller, 'opt-a', 1100)
        controller.live_snapshot()
        assert len(controller.capture.buffers.corrections) == 1

    def test_unknown_age_group_falls_back(self, clock):
        controller = SessionController(age_group='toddler', clock=clock)
        controller.start()
        result = controller.stop()
        assert result.age_group == '9-11'

    def test_result_dict_roundtrip(self, controller):
        controller.start()
        _correction(controller, 'opt-a', 1100)
        result = controller.stop()

        data = result.to_dict()
        assert data['friction_level'] == result.friction_level.value
        assert SessionResult.from_dict(data) == result


class TestIndependence:
    """Test that controllers share no state."""

    def test_two_controllers(self, clock):
        first = SessionController(age_group='9-11', clock=clock)
        second = SessionController(age_group='15+', clock=clock)

        first.start()
        second.start()
        for i in range(8):
            _correction(first, f'opt-{i}', 1000 + i * 1000)

        first_result = first.stop()
        second_result = second.stop()

        assert first_result.metrics.correction_count == 8
        assert second_result.metrics.correction_count == 0
        assert second_result.age_group == '15+'


class TestLiveTimer:
    """Test periodic live snapshots."""

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            LiveSnapshotTimer(0, lambda: None, lambda _: None)

    def test_start_without_loop(self):
        timer = LiveSnapshotTimer(10, lambda: None, lambda _: None)
        assert timer.start() is False
        assert not timer.running

    def test_controller_emits_live_snapshots(self):
        received = []

        async def scenario():
            controller = SessionController(
                config={'session': {'live_interval_ms': 10}},
                clock=FakeClock(0.0),
                on_live_snapshot=received.append,
            )
            controller.start()
            await asyncio.sleep(0.08)
            controller.stop()
            count = len(received)
            await asyncio.sleep(0.05)
            return count

        count_at_stop = asyncio.run(scenario())

        assert count_at_stop >= 1
        assert len(received) == count_at_stop
        assert all(not r.is_final for r in received)

    def test_callback_errors_do_not_stop_timer(self):
        calls = []

        def failing(_):
            calls.append(1)
            raise RuntimeError("render failed")

        async def scenario():
            timer = LiveSnapshotTimer(5, lambda: None, failing)
            timer.start()
            await asyncio.sleep(0.05)
            timer.cancel()

        asyncio.run(scenario())
        assert len(calls) >= 2
