"""
Pointer capture module.

This package turns normalized host pointer events into session buffers:
1. Movement records (distance, speed, direction)
2. Clicks with hover-to-click hesitation
3. Hovers and corrections (hovers abandoned without a click)

The capture layer has no dependency on any UI toolkit. Hosts push events
through EventCapture.dispatch().
"""

from .events import (
    PointerEventKind,
    PointerInput,
    Sample,
    MovementRecord,
    ClickEvent,
    HoverEvent,
    CorrectionEvent,
)
from .buffers import InteractionBuffers, FrozenBuffers
from .capture import EventCapture, wall_clock_ms

__all__ = [
    'PointerEventKind',
    'PointerInput',
    'Sample',
    'MovementRecord',
    'ClickEvent',
    'HoverEvent',
    'CorrectionEvent',
    'InteractionBuffers',
    'FrozenBuffers',
    'EventCapture',
    'wall_clock_ms',
]
