"""
Session controller.

Owns one EventCapture and drives the session lifecycle:

    idle --start()--> tracking --stop()--> idle

- start(): no-op while tracking; otherwise clears buffers, records the start
  time, attaches capture and starts the live timer (if a callback is set)
- stop(): no-op while idle (returns the last result); otherwise computes the
  final result, then detaches capture and cancels the live timer
- reset(): clears buffers and cached results in either state, without
  changing the state

Controllers are explicitly constructed and caller-owned. Any number can run
side by side without sharing state.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from pointer_capture import EventCapture, PointerInput, wall_clock_ms
from scoring import DEFAULT_AGE_GROUP, resolve_age_group
from utils.config_loader import get_nested_config

from .live import LiveSnapshotTimer
from .results import SessionResult, build_session_result

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle state of a session controller."""
    IDLE = "idle"
    TRACKING = "tracking"


class SessionController:
    """
    Public control surface for one interaction-metrics session.

    Usage:
        controller = SessionController(age_group='9-11')
        controller.start(target='reading-task')
        for event in host_events:
            controller.dispatch(event)
        result = controller.stop()
        result.to_dict()
    """

    def __init__(
        self,
        age_group: str = DEFAULT_AGE_GROUP,
        config: Optional[Dict] = None,
        clock: Optional[Callable[[], float]] = None,
        on_live_snapshot: Optional[Callable[[SessionResult], None]] = None,
    ):
        """
        Initialize controller.

        Args:
            age_group: Baseline age group (unknown groups fall back to default)
            config: Configuration dict
            clock: Millisecond clock for session start/stop times
            on_live_snapshot: Optional callback receiving periodic live results
        """
        self.config = config
        self.age_group = resolve_age_group(age_group, config)
        self.clock = clock or wall_clock_ms
        self.capture = EventCapture(config=config, clock=self.clock)
        self.on_live_snapshot = on_live_snapshot

        self._state = SessionState.IDLE
        self._last_result: Optional[SessionResult] = None
        self._timer: Optional[LiveSnapshotTimer] = None

        logger.info(f"Session controller initialized: age_group={self.age_group}")

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state == SessionState.TRACKING

    @property
    def last_result(self) -> Optional[SessionResult]:
        return self._last_result

    def start(self, target: Any = None, timestamp_ms: Optional[float] = None) -> bool:
        """
        Begin tracking on ``target``.

        ``timestamp_ms`` overrides the clock for the session start. It must be
        on the same clock as the event timestamps: hosts stamping events with
        a relative clock (e.g. performance.now()) must pass it, otherwise the
        wall-clock start lies far from the events and the start-to-first-click
        idle gap is lost.

        Starting after a previous stop() begins a fresh session: buffers and
        the cached result are cleared here.

        Returns:
            True if tracking started, False if it was already running
        """
        if self.is_tracking:
            logger.debug("Session already tracking, ignoring start()")
            return False

        self._last_result = None
        self.capture.start(target, timestamp_ms)
        self._state = SessionState.TRACKING

        if self.on_live_snapshot is not None:
            interval = float(get_nested_config(self.config, 'session.live_interval_ms', 500))
            self._timer = LiveSnapshotTimer(interval, self.live_snapshot, self.on_live_snapshot)
            self._timer.start()

        logger.info(f"Session started (age_group={self.age_group})")
        return True

    def stop(self, timestamp_ms: Optional[float] = None) -> SessionResult:
        """
        Stop tracking and return the final result.

        ``timestamp_ms`` overrides the clock for the completion time, on the
        same clock as the event timestamps.

        While idle this is a no-op that returns the last result, or a result
        computed from the current buffers if there is none yet.
        """
        if not self.is_tracking:
            logger.debug("Session not tracking, stop() returns last result")
            if self._last_result is None:
                self._last_result = self._build(final=False)
            return self._last_result

        # Score before detaching so a failure leaves the session tracking
        result = self._build(final=True, now_ms=timestamp_ms)

        self._cancel_timer()
        self.capture.stop()
        self._state = SessionState.IDLE

        self._last_result = result
        logger.info(
            f"Session stopped: friction={self._last_result.friction_level.value}, "
            f"duration={self._last_result.session_duration_ms:.0f}ms"
        )
        return self._last_result

    def reset(self) -> None:
        """Clear buffers and cached results without changing state."""
        self.capture.reset()
        self._last_result = None
        logger.debug(f"Session reset (state={self._state.value})")

    def dispatch(self, event: Union[PointerInput, Dict[str, Any]]) -> bool:
        """Input port for host pointer events. Ignored while idle."""
        return self.capture.dispatch(event)

    def live_snapshot(self) -> SessionResult:
        """Score the buffers captured so far without modifying them."""
        return self._build(final=False)

    def close(self) -> None:
        """Tear down: stop tracking if needed and cancel the live timer."""
        if self.is_tracking:
            self.stop()
        self._cancel_timer()

    def _build(self, final: bool, now_ms: Optional[float] = None) -> SessionResult:
        return build_session_result(
            self.capture.buffers.copy(),
            self.age_group,
            self.capture.session_start_ms,
            now_ms if now_ms is not None else self.clock(),
            self.config,
            final=final,
        )

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
