"""
Deviation scoring and friction classification.

Compares observed metrics with the age-group baseline:

    deviation = |observed - baseline| / max(baseline, floor)

Floors keep near-zero baselines from inflating ratios: 0.1 for jitter and
speed variance, 1 for corrections. Hesitation uses its own baseline, which
is always positive in the reference table.

Friction level = mean deviation over the tracked metrics:
- < 0.3: low
- < 0.7: medium
- otherwise: high

Idle-with-motion is reported in the metrics but is not a tracked metric for
the aggregate. Live and final results share this module, so the policy
holds on both paths.
"""

import logging
import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from utils.config_loader import get_nested_config

logger = logging.getLogger(__name__)

TRACKED_METRICS = ('hesitation', 'jitter', 'corrections', 'speed_variance')

DEFAULT_FLOORS = {
    'jitter': 0.1,
    'corrections': 1.0,
    'speed_variance': 0.1,
    'idle_motion': 1.0,
}


class FrictionLevel(str, Enum):
    """Aggregate friction classification."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class DeviationSet:
    """Per-metric deviation ratios, one entry per tracked metric."""
    hesitation: float = 0.0
    jitter: float = 0.0
    corrections: float = 0.0
    speed_variance: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, float]) -> 'DeviationSet':
        return cls(**{name: float(data.get(name, 0.0)) for name in TRACKED_METRICS})

    @property
    def mean(self) -> float:
        return _exact_mean(self.to_dict().values())


def calculate_deviation(observed: float, baseline: float, floor: float = 0.0) -> float:
    """
    Deviation ratio of an observed value from its baseline.

    Returns 0 if both baseline and floor are non-positive.
    """
    denominator = max(baseline, floor)
    if denominator <= 0:
        return 0.0
    return abs(observed - baseline) / denominator


def _floor(config: Optional[Dict], name: str) -> float:
    return float(get_nested_config(config, f'scoring.deviation_floors.{name}', DEFAULT_FLOORS[name]))


def compute_deviations(snapshot, baseline, config: Optional[Dict] = None) -> DeviationSet:
    """
    Compute the deviation set for a metrics snapshot.

    Args:
        snapshot: MetricsSnapshot
        baseline: Baseline for the session's age group
        config: Configuration dict (scoring.deviation_floors)

    Returns:
        DeviationSet
    """
    return DeviationSet(
        hesitation=calculate_deviation(
            snapshot.hesitation_time_ms,
            baseline.avg_hesitation_ms,
            baseline.avg_hesitation_ms,
        ),
        jitter=calculate_deviation(
            snapshot.jitter_score,
            baseline.avg_jitter_score,
            _floor(config, 'jitter'),
        ),
        corrections=calculate_deviation(
            snapshot.correction_count,
            baseline.avg_corrections,
            _floor(config, 'corrections'),
        ),
        speed_variance=calculate_deviation(
            snapshot.speed_variance,
            baseline.avg_speed_variance,
            _floor(config, 'speed_variance'),
        ),
    )


def compute_idle_motion_deviation(snapshot, baseline, config: Optional[Dict] = None) -> float:
    """Deviation of idle-with-motion time, reported outside the aggregate."""
    return calculate_deviation(
        snapshot.idle_with_motion_time_ms,
        baseline.avg_idle_motion_ms,
        _floor(config, 'idle_motion'),
    )


def determine_friction_level(
    deviations: Union[DeviationSet, Mapping[str, float]],
    config: Optional[Dict] = None
) -> FrictionLevel:
    """
    Classify the mean deviation into a friction level.

    The mean is computed with math.fsum, so the result does not depend on
    the order of the entries.

    Args:
        deviations: DeviationSet or mapping of metric name to deviation
        config: Configuration dict (scoring.friction_thresholds)

    Returns:
        FrictionLevel (low for an empty mapping)
    """
    if isinstance(deviations, DeviationSet):
        values = list(deviations.to_dict().values())
    else:
        values = list(deviations.values())

    if not values:
        return FrictionLevel.LOW

    low = float(get_nested_config(config, 'scoring.friction_thresholds.low', 0.3))
    medium = float(get_nested_config(config, 'scoring.friction_thresholds.medium', 0.7))

    mean_deviation = _exact_mean(values)

    if mean_deviation < low:
        return FrictionLevel.LOW
    if mean_deviation < medium:
        return FrictionLevel.MEDIUM
    return FrictionLevel.HIGH


def calculate_category_friction(deviations: DeviationSet, idle_motion_deviation: float = 0.0) -> Dict[str, int]:
    """
    Friction percentages by task category.

    - reading: hesitation + corrections
    - attention: idle-with-motion + jitter
    - memory: speed variance + corrections

    Each is the mean of its two deviations x 100, capped at 100.
    """
    def _percent(a: float, b: float) -> int:
        # Half-up rounding, 12.5 -> 13
        return int(math.floor(min((a + b) / 2.0 * 100.0, 100.0) + 0.5))

    return {
        'reading': _percent(deviations.hesitation, deviations.corrections),
        'attention': _percent(idle_motion_deviation, deviations.jitter),
        'memory': _percent(deviations.speed_variance, deviations.corrections),
    }


def _exact_mean(values) -> float:
    values = list(values)
    if not values:
        return 0.0
    return math.fsum(values) / len(values)
