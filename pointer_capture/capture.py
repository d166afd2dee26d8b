"""
Event capture for pointer interaction sessions.

Capture is the input port between a host UI and the metrics engine. The host
calls dispatch() with normalized events; capture appends derived records to
the session buffers. While stopped, capture is detached and every event is
dropped, so a finished session cannot be mutated afterwards.

Per-event rules:
- move: distance/speed/direction against the previous sample. The first move
  after start only seeds the previous sample. Zero elapsed time emits nothing.
- click: hesitation is the time since the open hover on the same target
  (0 without one). A click always resolves the open hover.
- hover_enter: opens a hover, replacing any hover already open.
- hover_leave: closes the matching open hover. A dwell above the threshold
  records a correction (an aborted decision).
"""

import logging
import math
import time
from typing import Any, Callable, Dict, Optional, Union

from utils.config_loader import get_nested_config

from .buffers import InteractionBuffers
from .events import (
    ClickEvent,
    CorrectionEvent,
    HoverEvent,
    MovementRecord,
    PointerEventKind,
    PointerInput,
    Sample,
)

logger = logging.getLogger(__name__)


def wall_clock_ms() -> float:
    """Current wall-clock time in milliseconds."""
    return time.time() * 1000.0


class EventCapture:
    """
    Capture pointer events into session-scoped buffers.

    Usage:
        capture = EventCapture()
        capture.start(target="task-panel")
        capture.dispatch({'kind': 'move', 'x': 10, 'y': 20, 'timestamp': 1000})
        capture.stop()
        capture.buffers.movements
    """

    def __init__(
        self,
        config: Optional[Dict] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize capture.

        Args:
            config: Configuration dict (reads capture.min_dwell_ms)
            clock: Millisecond clock used for session start time
        """
        self.min_dwell_ms = float(get_nested_config(config, 'capture.min_dwell_ms', 200))
        self.clock = clock or wall_clock_ms
        self.buffers = InteractionBuffers()
        self.target: Any = None
        self.session_start_ms: Optional[float] = None
        self._attached = False

        self._handlers = {
            PointerEventKind.MOVE: self.handle_move,
            PointerEventKind.CLICK: self.handle_click,
            PointerEventKind.HOVER_ENTER: self.handle_hover_enter,
            PointerEventKind.HOVER_LEAVE: self.handle_hover_leave,
        }

    @property
    def is_attached(self) -> bool:
        return self._attached

    def start(self, target: Any = None, timestamp_ms: Optional[float] = None) -> bool:
        """
        Attach to a target and begin a fresh session.

        Buffers from any previous session are cleared here, so data never
        leaks from one session into the next even without reset().

        Returns:
            True if a session started, False if capture was already running
        """
        if self._attached:
            logger.debug("Capture already started, ignoring start()")
            return False

        self.buffers.clear()
        self.target = target
        self.session_start_ms = float(timestamp_ms) if timestamp_ms is not None else self.clock()
        self._attached = True

        logger.info(f"Capture started on target={target!r} at {self.session_start_ms:.0f}ms")
        return True

    def stop(self) -> bool:
        """
        Detach from the target and freeze the buffers.

        Returns:
            True if capture was running, False if it was already stopped
        """
        if not self._attached:
            return False

        self._attached = False
        logger.info(
            f"Capture stopped: {len(self.buffers.movements)} movements, "
            f"{len(self.buffers.clicks)} clicks, {len(self.buffers.corrections)} corrections"
        )
        return True

    def reset(self) -> None:
        """Clear all buffers without changing attachment state."""
        self.buffers.clear()
        logger.debug("Capture buffers reset")

    def dispatch(self, event: Union[PointerInput, Dict[str, Any]]) -> bool:
        """
        Feed one host event into capture.

        Malformed events are logged and dropped. Events arriving while
        detached are ignored.

        Returns:
            True if the event was processed
        """
        if not self._attached:
            logger.debug("Capture detached, dropping event")
            return False

        if not isinstance(event, PointerInput):
            try:
                event = PointerInput.from_dict(event)
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Dropping malformed pointer event: {e}")
                return False

        self._handlers[event.kind](event)
        return True

    def handle_move(self, event: PointerInput) -> None:
        sample = Sample(event.x, event.y, event.timestamp_ms)
        previous = self.buffers.last_sample

        if previous is not None:
            dx = sample.x - previous.x
            dy = sample.y - previous.y
            elapsed = sample.timestamp_ms - previous.timestamp_ms

            if elapsed > 0:
                distance = math.hypot(dx, dy)
                speed = distance / elapsed
                if math.isfinite(speed):
                    self.buffers.movements.append(MovementRecord(
                        distance=distance,
                        speed=speed,
                        direction_radians=math.atan2(dy, dx),
                        timestamp_ms=sample.timestamp_ms,
                    ))
                else:
                    logger.warning(f"Dropping movement with non-finite speed at {sample.timestamp_ms:.0f}ms")

        self.buffers.last_sample = sample

    def handle_click(self, event: PointerInput) -> None:
        hover = self.buffers.open_hover
        hesitation_ms = 0.0

        if hover is not None and _same_target(hover.target_id, event.target_id):
            hesitation_ms = max(0.0, event.timestamp_ms - hover.start_timestamp_ms)

        self.buffers.clicks.append(ClickEvent(
            x=event.x,
            y=event.y,
            timestamp_ms=event.timestamp_ms,
            target_kind=event.target_kind,
            hesitation_ms=hesitation_ms,
            target_id=event.target_id,
        ))

        # A click resolves the hover, it is never a correction
        self.buffers.open_hover = None

    def handle_hover_enter(self, event: PointerInput) -> None:
        hover = HoverEvent(
            target_kind=event.target_kind,
            start_timestamp_ms=event.timestamp_ms,
            target_id=event.target_id,
        )
        self.buffers.hovers.append(hover)
        self.buffers.open_hover = hover

    def handle_hover_leave(self, event: PointerInput) -> None:
        hover = self.buffers.open_hover
        if hover is not None and hover.target_id == event.target_id:
            dwell_ms = event.timestamp_ms - hover.start_timestamp_ms
            if dwell_ms > self.min_dwell_ms:
                self.buffers.corrections.append(CorrectionEvent(
                    target_id=hover.target_id,
                    target_kind=hover.target_kind,
                    start_timestamp_ms=hover.start_timestamp_ms,
                    dwell_ms=dwell_ms,
                ))
                logger.debug(f"Correction on {hover.target_id!r} after {dwell_ms:.0f}ms")

        self.buffers.open_hover = None


def _same_target(hover_target: Optional[str], click_target: Optional[str]) -> bool:
    # Clicks without a target id resolve whichever hover is open
    return click_target is None or hover_target == click_target
