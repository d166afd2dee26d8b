"""
Timing metrics.

Computes decision-timing signals from clicks, corrections and movements:
- Hesitation time (ms): mean hover-to-click delay
- Correction count: hovers abandoned after the dwell threshold
- Idle-with-motion time (ms): long gaps between actions during which the
  pointer kept moving but nothing was clicked
"""

import logging
from typing import Dict, Optional, Sequence

import numpy as np

from utils.config_loader import get_nested_config

logger = logging.getLogger(__name__)


def compute_hesitation_time(clicks: Sequence) -> float:
    """
    Mean hesitation over clicks that were preceded by a hover.

    Clicks with zero hesitation (no hover before them) are excluded.

    Returns:
        Mean hesitation in ms, 0 if no click had a hover
    """
    hesitations = [c.hesitation_ms for c in clicks if c.hesitation_ms > 0]
    if not hesitations:
        return 0.0
    return float(np.mean(hesitations))


def compute_correction_count(corrections: Sequence) -> int:
    return len(corrections)


def compute_idle_motion_time(
    movements: Sequence,
    clicks: Sequence,
    session_start_ms: Optional[float],
    config: Optional[Dict] = None
) -> float:
    """
    Sum of action gaps in which the pointer moved without a click.

    Gaps run from session start to the first click and between consecutive
    clicks. A gap counts in full when it is longer than the gap threshold
    and more than the minimum number of movements fall strictly inside it.

    Args:
        movements: MovementRecords in arrival order
        clicks: ClickEvents in arrival order
        session_start_ms: Session start timestamp (ms); None disables the
                          start-to-first-click gap
        config: Configuration dict (metrics.idle_gap_ms,
                metrics.idle_min_movements)

    Returns:
        Idle-with-motion time in ms
    """
    if not movements or not clicks:
        return 0.0

    gap_threshold = float(get_nested_config(config, 'metrics.idle_gap_ms', 2000))
    min_movements = int(get_nested_config(config, 'metrics.idle_min_movements', 5))

    movement_times = np.asarray([m.timestamp_ms for m in movements], dtype=float)
    click_times = [c.timestamp_ms for c in clicks]

    idle_time = 0.0
    last_action = session_start_ms if session_start_ms is not None else click_times[0]

    for click_time in click_times:
        gap = click_time - last_action
        if gap > gap_threshold:
            inside = np.count_nonzero(
                (movement_times > last_action) & (movement_times < click_time)
            )
            if inside > min_movements:
                idle_time += gap
        last_action = click_time

    return float(idle_time)
