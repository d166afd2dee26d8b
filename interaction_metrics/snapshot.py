"""
Metrics snapshot.

Reduces a set of interaction buffers to the five scalar friction signals
plus movement totals. Used both for live feedback while a session runs and
for the final result when it stops; both paths go through
compute_metrics_snapshot() so they cannot diverge.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .movement import (
    compute_average_speed,
    compute_jitter_score,
    compute_speed_variance,
    compute_total_distance,
)
from .timing import (
    compute_correction_count,
    compute_hesitation_time,
    compute_idle_motion_time,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricsSnapshot:
    """
    Scalar interaction metrics for one session.

    Attributes:
        jitter_score: Rate of sharp heading reversals (0-1)
        hesitation_time_ms: Mean hover-to-click delay (ms)
        correction_count: Hovers abandoned without a click
        idle_with_motion_time_ms: Moving-but-not-acting time (ms)
        speed_variance: Normalized speed spread (0-1)
        total_distance: Total pointer path length (px)
        average_speed: Mean instantaneous speed (px/ms)
    """
    jitter_score: float = 0.0
    hesitation_time_ms: float = 0.0
    correction_count: int = 0
    idle_with_motion_time_ms: float = 0.0
    speed_variance: float = 0.0
    total_distance: float = 0.0
    average_speed: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MetricsSnapshot':
        return cls(
            jitter_score=float(data.get('jitter_score', 0.0)),
            hesitation_time_ms=float(data.get('hesitation_time_ms', 0.0)),
            correction_count=int(data.get('correction_count', 0)),
            idle_with_motion_time_ms=float(data.get('idle_with_motion_time_ms', 0.0)),
            speed_variance=float(data.get('speed_variance', 0.0)),
            total_distance=float(data.get('total_distance', 0.0)),
            average_speed=float(data.get('average_speed', 0.0)),
        )


def compute_metrics_snapshot(
    buffers,
    session_start_ms: Optional[float] = None,
    config: Optional[Dict] = None
) -> MetricsSnapshot:
    """
    Compute all metrics from captured buffers.

    The buffers are only read. With no captured data every metric is 0.

    Args:
        buffers: InteractionBuffers or FrozenBuffers
        session_start_ms: Session start timestamp (ms)
        config: Configuration dict

    Returns:
        MetricsSnapshot
    """
    movements = list(buffers.movements)
    clicks = list(buffers.clicks)

    directions = [m.direction_radians for m in movements]
    speeds = [m.speed for m in movements]
    distances = [m.distance for m in movements]

    snapshot = MetricsSnapshot(
        jitter_score=compute_jitter_score(directions, config),
        hesitation_time_ms=compute_hesitation_time(clicks),
        correction_count=compute_correction_count(buffers.corrections),
        idle_with_motion_time_ms=compute_idle_motion_time(
            movements, clicks, session_start_ms, config
        ),
        speed_variance=compute_speed_variance(speeds, config),
        total_distance=compute_total_distance(distances),
        average_speed=compute_average_speed(speeds),
    )

    logger.debug(
        f"Metrics snapshot: jitter={snapshot.jitter_score:.3f}, "
        f"hesitation={snapshot.hesitation_time_ms:.0f}ms, "
        f"corrections={snapshot.correction_count}, "
        f"idle_motion={snapshot.idle_with_motion_time_ms:.0f}ms, "
        f"speed_var={snapshot.speed_variance:.3f}"
    )

    return snapshot
