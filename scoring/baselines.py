"""
Age-normed interaction baselines.

Static reference values for each tracked metric, keyed by age group. These
values are heuristic reference points for a learning-support tool. They are
NOT clinical norms.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from utils.config_loader import get_nested_config

logger = logging.getLogger(__name__)

DEFAULT_AGE_GROUP = '9-11'


class UnknownAgeGroupError(KeyError):
    """Raised by strict baseline lookups for an age group not in the table."""


@dataclass(frozen=True)
class Baseline:
    """Expected metric values for one age group."""
    avg_hesitation_ms: float
    avg_jitter_score: float
    avg_corrections: float
    avg_idle_motion_ms: float
    avg_speed_variance: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Baseline':
        return cls(
            avg_hesitation_ms=float(data['avg_hesitation_ms']),
            avg_jitter_score=float(data['avg_jitter_score']),
            avg_corrections=float(data['avg_corrections']),
            avg_idle_motion_ms=float(data['avg_idle_motion_ms']),
            avg_speed_variance=float(data['avg_speed_variance']),
        )


AGE_BASELINES: Dict[str, Baseline] = {
    '6-8': Baseline(
        avg_hesitation_ms=2500,
        avg_jitter_score=0.4,
        avg_corrections=3,
        avg_idle_motion_ms=4000,
        avg_speed_variance=0.5,
    ),
    '9-11': Baseline(
        avg_hesitation_ms=1800,
        avg_jitter_score=0.3,
        avg_corrections=2,
        avg_idle_motion_ms=3000,
        avg_speed_variance=0.4,
    ),
    '12-14': Baseline(
        avg_hesitation_ms=1200,
        avg_jitter_score=0.2,
        avg_corrections=1.5,
        avg_idle_motion_ms=2000,
        avg_speed_variance=0.3,
    ),
    '15+': Baseline(
        avg_hesitation_ms=800,
        avg_jitter_score=0.15,
        avg_corrections=1,
        avg_idle_motion_ms=1500,
        avg_speed_variance=0.25,
    ),
}


def require_baseline(age_group: str) -> Baseline:
    """
    Strict baseline lookup.

    Raises:
        UnknownAgeGroupError: If the age group is not in the table
    """
    try:
        return AGE_BASELINES[age_group]
    except (KeyError, TypeError):
        raise UnknownAgeGroupError(age_group)


def resolve_age_group(age_group: Optional[str], config: Optional[Dict] = None) -> str:
    """
    Return a valid age-group key, falling back to the default group.

    Unknown keys are logged at warning level and never fail the caller.
    """
    if age_group in AGE_BASELINES:
        return age_group

    default = get_nested_config(config, 'scoring.default_age_group', DEFAULT_AGE_GROUP)
    if default not in AGE_BASELINES:
        default = DEFAULT_AGE_GROUP

    logger.warning(f"Unknown age group: {age_group!r}, defaulting to {default}")
    return default


def get_baseline_for_age(age_group: Optional[str], config: Optional[Dict] = None) -> Baseline:
    """Lenient baseline lookup with fallback to the default age group."""
    try:
        return require_baseline(age_group)
    except UnknownAgeGroupError:
        return AGE_BASELINES[resolve_age_group(age_group, config)]


def age_group_for_age(age) -> str:
    """
    Map a numeric age to a baseline age-group key.

    Ages below 6 use the youngest group; unparseable ages use the default.
    """
    try:
        years = int(age)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable age {age!r}, defaulting to {DEFAULT_AGE_GROUP}")
        return DEFAULT_AGE_GROUP

    if years <= 8:
        return '6-8'
    if years <= 11:
        return '9-11'
    if years <= 14:
        return '12-14'
    return '15+'
