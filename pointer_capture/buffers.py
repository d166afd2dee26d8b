"""
Session-scoped interaction buffers.

One InteractionBuffers instance holds everything a single session has
captured. It is a plain value object: tests can build one directly instead
of simulating pointer events.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .events import ClickEvent, CorrectionEvent, HoverEvent, MovementRecord, Sample


@dataclass
class InteractionBuffers:
    """
    Mutable buffers owned by one capture session.

    Attributes:
        movements: MovementRecords in arrival order
        clicks: ClickEvents in arrival order
        hovers: Every hover-enter seen, in arrival order
        corrections: CorrectionEvents in arrival order
        last_sample: Previous pointer sample (seeds the next movement)
        open_hover: Hover currently open, closed by click or leave
    """
    movements: List[MovementRecord] = field(default_factory=list)
    clicks: List[ClickEvent] = field(default_factory=list)
    hovers: List[HoverEvent] = field(default_factory=list)
    corrections: List[CorrectionEvent] = field(default_factory=list)
    last_sample: Optional[Sample] = None
    open_hover: Optional[HoverEvent] = None

    def clear(self) -> None:
        """Drop all captured data and transient hover/position state."""
        self.movements.clear()
        self.clicks.clear()
        self.hovers.clear()
        self.corrections.clear()
        self.last_sample = None
        self.open_hover = None

    def copy(self) -> 'FrozenBuffers':
        """Return an immutable view of the current contents."""
        return FrozenBuffers(
            movements=tuple(self.movements),
            clicks=tuple(self.clicks),
            hovers=tuple(self.hovers),
            corrections=tuple(self.corrections),
        )

    def counts(self) -> Dict[str, int]:
        return _counts(self)

    @property
    def is_empty(self) -> bool:
        return not (self.movements or self.clicks or self.hovers or self.corrections)


@dataclass(frozen=True)
class FrozenBuffers:
    """Point-in-time copy of InteractionBuffers used for snapshots."""
    movements: Tuple[MovementRecord, ...] = ()
    clicks: Tuple[ClickEvent, ...] = ()
    hovers: Tuple[HoverEvent, ...] = ()
    corrections: Tuple[CorrectionEvent, ...] = ()

    def counts(self) -> Dict[str, int]:
        return _counts(self)


def _counts(buffers) -> Dict[str, int]:
    return {
        'movement_count': len(buffers.movements),
        'click_count': len(buffers.clicks),
        'hover_count': len(buffers.hovers),
        'correction_count': len(buffers.corrections),
    }
