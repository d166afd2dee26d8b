"""
Pointer event records.

Host UIs feed normalized PointerInput events into the capture layer. Capture
turns them into the derived records below, which are immutable once created.

Timestamps are milliseconds on a single host clock. The capture layer never
reads the clock for per-event timing, so recorded sessions replay exactly.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class PointerEventKind(str, Enum):
    """Kinds of normalized pointer events accepted by the input port."""
    MOVE = "move"
    CLICK = "click"
    HOVER_ENTER = "hover_enter"
    HOVER_LEAVE = "hover_leave"


@dataclass(frozen=True)
class PointerInput:
    """
    One normalized event from the host UI.

    Attributes:
        kind: Event kind
        timestamp_ms: Host timestamp in milliseconds
        x: Pointer x position (move/click)
        y: Pointer y position (move/click)
        target_id: Identifier of the interactive element (click/hover)
        target_kind: Element kind, e.g. "BUTTON" (click/hover)
    """
    kind: PointerEventKind
    timestamp_ms: float
    x: float = 0.0
    y: float = 0.0
    target_id: Optional[str] = None
    target_kind: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PointerInput':
        """
        Build an input event from a plain mapping.

        Accepts snake_case keys as well as the camelCase keys browser
        clients send (``timestamp``, ``timestampMs``, ``targetId``,
        ``targetKind``).

        Raises:
            ValueError: If the kind is unknown, the timestamp is missing, or
                a timestamp or coordinate is not a finite number
        """
        raw_kind = data.get('kind', data.get('type'))
        try:
            kind = PointerEventKind(raw_kind)
        except ValueError:
            raise ValueError(f"Unknown pointer event kind: {raw_kind!r}")

        timestamp = data.get('timestamp_ms', data.get('timestampMs', data.get('timestamp')))
        if timestamp is None:
            raise ValueError(f"Pointer event without timestamp: {data!r}")

        timestamp_ms = _finite(timestamp, 'timestamp')
        x = _finite(data.get('x', 0.0), 'x')
        y = _finite(data.get('y', 0.0), 'y')

        target_id = data.get('target_id', data.get('targetId'))
        return cls(
            kind=kind,
            timestamp_ms=timestamp_ms,
            x=x,
            y=y,
            target_id=str(target_id) if target_id is not None else None,
            target_kind=data.get('target_kind', data.get('targetKind')),
        )


def _finite(value: Any, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Non-finite pointer event {name}: {value!r}")
    return number


@dataclass(frozen=True)
class Sample:
    """Raw pointer position at a point in time."""
    x: float
    y: float
    timestamp_ms: float


@dataclass(frozen=True)
class MovementRecord:
    """Movement between two consecutive samples."""
    distance: float
    speed: float  # px/ms
    direction_radians: float  # atan2(dy, dx), in [-pi, pi]
    timestamp_ms: float  # timestamp of the later sample


@dataclass(frozen=True)
class ClickEvent:
    """A click, with the hover-to-click delay that preceded it."""
    x: float
    y: float
    timestamp_ms: float
    target_kind: Optional[str]
    hesitation_ms: float
    target_id: Optional[str] = None


@dataclass(frozen=True)
class HoverEvent:
    """Pointer entering an interactive element."""
    target_kind: Optional[str]
    start_timestamp_ms: float
    target_id: Optional[str] = None


@dataclass(frozen=True)
class CorrectionEvent:
    """A hover that outlived the dwell threshold and ended without a click."""
    target_id: Optional[str]
    target_kind: Optional[str]
    start_timestamp_ms: float
    dwell_ms: float
