"""
Interaction metrics module.

This package reduces captured pointer buffers to five scalar signals:
1. Jitter score (0-1): sharp heading reversals
2. Hesitation time (ms): hover-to-click delay
3. Correction count: hovers abandoned without a click
4. Idle-with-motion time (ms): moving without acting
5. Speed variance (0-1): irregular pointer speed

All computations are pure and deterministic. Missing data yields 0.
"""

from .movement import (
    angular_difference,
    compute_jitter_score,
    compute_speed_variance,
    compute_total_distance,
    compute_average_speed,
)
from .timing import (
    compute_hesitation_time,
    compute_correction_count,
    compute_idle_motion_time,
)
from .snapshot import MetricsSnapshot, compute_metrics_snapshot

__all__ = [
    'angular_difference',
    'compute_jitter_score',
    'compute_speed_variance',
    'compute_total_distance',
    'compute_average_speed',
    'compute_hesitation_time',
    'compute_correction_count',
    'compute_idle_motion_time',
    'MetricsSnapshot',
    'compute_metrics_snapshot',
]
