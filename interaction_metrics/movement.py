"""
Movement metrics.

Computes the movement-derived signals from MovementRecord sequences:
- Jitter score (0-1): rate of sharp heading reversals
- Speed variance (0-1): normalized spread of instantaneous speed
- Total distance and average speed

Interpretation:
- High jitter -> rapid back-and-forth motion, possible uncertainty
- High speed variance -> irregular, stop-start interaction

Engineering approach:
- Pure functions over plain sequences (no capture state)
- Insufficient data degrades to 0, never raises
"""

import logging
import math
from typing import Dict, Optional, Sequence

import numpy as np

from utils.config_loader import get_nested_config

logger = logging.getLogger(__name__)


def angular_difference(a: float, b: float) -> float:
    """Smallest angle between two headings, in [0, pi]."""
    diff = abs(a - b) % (2.0 * math.pi)
    return min(diff, 2.0 * math.pi - diff)


def compute_jitter_score(directions: Sequence[float], config: Optional[Dict] = None) -> float:
    """
    Compute the jitter score from consecutive movement headings.

    Formula:
        jitter = reversals / len(directions)

    A reversal is a transition whose heading change exceeds the reversal
    threshold (90 degrees by default). The heading change is the wrapped
    angle in [0, pi], so 179 deg -> -179 deg is a 2 degree turn, not a
    reversal. A raw |d[i] - d[i-1]| difference would count it as one.

    Args:
        directions: Headings in radians, in arrival order
        config: Configuration dict (metrics.reversal_threshold_deg,
                metrics.min_direction_samples)

    Returns:
        Jitter score in [0, 1]; 0 with fewer than the minimum samples
    """
    min_samples = int(get_nested_config(config, 'metrics.min_direction_samples', 3))
    if len(directions) < min_samples or len(directions) == 0:
        return 0.0

    threshold = math.radians(float(get_nested_config(config, 'metrics.reversal_threshold_deg', 90)))

    reversals = sum(
        1 for previous, current in zip(directions, directions[1:])
        if angular_difference(current, previous) > threshold
    )

    return float(np.clip(reversals / len(directions), 0.0, 1.0))


def compute_speed_variance(speeds: Sequence[float], config: Optional[Dict] = None) -> float:
    """
    Compute normalized speed variance.

    Formula:
        variance = population variance of speeds (px/ms)
        normalized = min(sqrt(variance) / scale, 1)

    Args:
        speeds: Instantaneous speeds in px/ms
        config: Configuration dict (metrics.speed_variance_scale)

    Returns:
        Normalized speed variance in [0, 1]; 0 with fewer than 2 samples
    """
    if len(speeds) < 2:
        return 0.0

    scale = float(get_nested_config(config, 'metrics.speed_variance_scale', 2.0))
    variance = float(np.var(np.asarray(speeds, dtype=float)))
    if not math.isfinite(variance):
        # Overflowed spread is as irregular as it gets
        return 1.0

    return float(np.clip(math.sqrt(variance) / scale, 0.0, 1.0))


def compute_total_distance(distances: Sequence[float]) -> float:
    if len(distances) == 0:
        return 0.0
    return float(np.sum(np.asarray(distances, dtype=float)))


def compute_average_speed(speeds: Sequence[float]) -> float:
    if len(speeds) == 0:
        return 0.0
    return float(np.mean(np.asarray(speeds, dtype=float)))
