"""
Friction scoring module.

This package compares interaction metrics against age-normed baselines:
1. Baselines: static expected values per age group
2. Deviation: per-metric deviation ratios and the friction level
3. Explanation: plain-language findings
4. Screening: coarse learning-domain screening table

All outputs are:
- Interpretable (ratios against a stated baseline)
- Explainable (fixed, transparent rules)
- Non-diagnostic (interaction observation, not assessment)
"""

from .baselines import (
    AGE_BASELINES,
    DEFAULT_AGE_GROUP,
    Baseline,
    UnknownAgeGroupError,
    age_group_for_age,
    get_baseline_for_age,
    require_baseline,
    resolve_age_group,
)
from .deviation import (
    TRACKED_METRICS,
    DeviationSet,
    FrictionLevel,
    calculate_category_friction,
    calculate_deviation,
    compute_deviations,
    compute_idle_motion_deviation,
    determine_friction_level,
)
from .explanation import Explanation, generate_explanation

__all__ = [
    'AGE_BASELINES',
    'DEFAULT_AGE_GROUP',
    'Baseline',
    'UnknownAgeGroupError',
    'age_group_for_age',
    'get_baseline_for_age',
    'require_baseline',
    'resolve_age_group',
    'TRACKED_METRICS',
    'DeviationSet',
    'FrictionLevel',
    'calculate_category_friction',
    'calculate_deviation',
    'compute_deviations',
    'compute_idle_motion_deviation',
    'determine_friction_level',
    'Explanation',
    'generate_explanation',
]
