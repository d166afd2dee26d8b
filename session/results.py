"""
Session results.

A SessionResult bundles everything a session produced: metrics, the baseline
they were scored against, deviations, friction level and explanation, plus
duration and raw counts. Results are immutable and serialize to plain JSON
data for rendering, storage and prompt construction.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from interaction_metrics import MetricsSnapshot, compute_metrics_snapshot
from scoring import (
    Baseline,
    DeviationSet,
    Explanation,
    FrictionLevel,
    calculate_category_friction,
    compute_deviations,
    compute_idle_motion_deviation,
    determine_friction_level,
    generate_explanation,
    get_baseline_for_age,
    resolve_age_group,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawCounts:
    """Raw event counts for a session."""
    movement_count: int = 0
    click_count: int = 0
    hover_count: int = 0
    correction_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'movement_count': self.movement_count,
            'click_count': self.click_count,
            'hover_count': self.hover_count,
            'correction_count': self.correction_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawCounts':
        return cls(**{key: int(data.get(key, 0)) for key in cls().to_dict()})


@dataclass(frozen=True)
class SessionResult:
    """
    Complete, immutable outcome of one session (or one live snapshot).

    Attributes:
        age_group: Age group the baseline was taken from
        metrics: MetricsSnapshot
        baseline: Baseline for age_group
        deviations: DeviationSet against the baseline
        friction_level: Aggregate friction classification
        explanation: Plain-language findings
        session_duration_ms: Time from session start to result
        raw_counts: Raw movement/click/hover/correction counts
        category_friction: Reading/attention/memory friction percentages
        completed_at_ms: Completion timestamp for final results, None for live
        is_final: True when produced by stop()
    """
    age_group: str
    metrics: MetricsSnapshot
    baseline: Baseline
    deviations: DeviationSet
    friction_level: FrictionLevel
    explanation: Explanation
    session_duration_ms: float = 0.0
    raw_counts: RawCounts = field(default_factory=RawCounts)
    category_friction: Dict[str, int] = field(default_factory=dict)
    completed_at_ms: Optional[float] = None
    is_final: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-native structured data."""
        return {
            'age_group': self.age_group,
            'metrics': self.metrics.to_dict(),
            'baseline': self.baseline.to_dict(),
            'deviations': self.deviations.to_dict(),
            'friction_level': self.friction_level.value,
            'explanation': self.explanation.to_dict(),
            'session_duration_ms': self.session_duration_ms,
            'raw_counts': self.raw_counts.to_dict(),
            'category_friction': dict(self.category_friction),
            'completed_at_ms': self.completed_at_ms,
            'is_final': self.is_final,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionResult':
        completed_at = data.get('completed_at_ms')
        return cls(
            age_group=data['age_group'],
            metrics=MetricsSnapshot.from_dict(data['metrics']),
            baseline=Baseline.from_dict(data['baseline']),
            deviations=DeviationSet.from_dict(data['deviations']),
            friction_level=FrictionLevel(data['friction_level']),
            explanation=Explanation.from_dict(data['explanation']),
            session_duration_ms=float(data.get('session_duration_ms', 0.0)),
            raw_counts=RawCounts.from_dict(data.get('raw_counts', {})),
            category_friction={k: int(v) for k, v in data.get('category_friction', {}).items()},
            completed_at_ms=float(completed_at) if completed_at is not None else None,
            is_final=bool(data.get('is_final', False)),
        )


def build_session_result(
    buffers,
    age_group: Optional[str],
    session_start_ms: Optional[float],
    now_ms: float,
    config: Optional[Dict] = None,
    final: bool = False
) -> SessionResult:
    """
    Score captured buffers into a SessionResult.

    This is the only scoring path; live snapshots and final results both
    use it. Buffers are read, never modified.

    Args:
        buffers: InteractionBuffers or FrozenBuffers
        age_group: Requested age group (unknown groups fall back to default)
        session_start_ms: Session start timestamp, None if never started
        now_ms: Timestamp of this result
        config: Configuration dict
        final: Mark the result as the final one of the session

    Returns:
        SessionResult
    """
    resolved_group = resolve_age_group(age_group, config)
    baseline = get_baseline_for_age(resolved_group, config)

    metrics = compute_metrics_snapshot(buffers, session_start_ms, config)
    counts = buffers.counts()
    if any(counts.values()):
        deviations = compute_deviations(metrics, baseline, config)
        idle_deviation = compute_idle_motion_deviation(metrics, baseline, config)
    else:
        # Nothing captured: neutral, not "far below baseline"
        deviations = DeviationSet()
        idle_deviation = 0.0

    level = determine_friction_level(deviations, config)
    explanation = generate_explanation(metrics, baseline, deviations, level, config)
    category = calculate_category_friction(deviations, idle_deviation)

    duration = max(0.0, now_ms - session_start_ms) if session_start_ms is not None else 0.0

    return SessionResult(
        age_group=resolved_group,
        metrics=metrics,
        baseline=baseline,
        deviations=deviations,
        friction_level=level,
        explanation=explanation,
        session_duration_ms=duration,
        raw_counts=RawCounts(**counts),
        category_friction=category,
        completed_at_ms=now_ms if final else None,
        is_final=final,
    )
