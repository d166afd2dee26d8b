"""
Plain-language explanation of friction results.

Each metric contributes at most one sentence, and only when its deviation
exceeds the narrative bar (0.5 by default). This bar is separate from, and
higher than, the low/medium classification boundary. With no sentence, a
single "within expected range" sentence is emitted.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from utils.config_loader import get_nested_config

from .deviation import FrictionLevel

logger = logging.getLogger(__name__)

WITHIN_RANGE_SENTENCE = 'Interaction patterns are within expected range for this age group.'
JITTER_SENTENCE = 'Observed increased back-and-forth mouse movement, indicating possible uncertainty.'
SPEED_VARIANCE_SENTENCE = 'Mouse movement speed was inconsistent, showing irregular interaction patterns.'


@dataclass(frozen=True)
class Explanation:
    """Friction level with ordered findings."""
    level: FrictionLevel
    summary: str
    details: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level.value,
            'summary': self.summary,
            'details': list(self.details),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Explanation':
        return cls(
            level=FrictionLevel(data['level']),
            summary=data.get('summary', ''),
            details=tuple(data.get('details', ())),
        )


def generate_explanation(
    snapshot,
    baseline,
    deviations,
    level: FrictionLevel,
    config: Optional[Dict] = None
) -> Explanation:
    """
    Build the explanation for a scored snapshot.

    Rule order is fixed: hesitation, jitter, corrections, speed variance.

    Args:
        snapshot: MetricsSnapshot
        baseline: Baseline used for scoring
        deviations: DeviationSet
        level: Friction level already determined for the deviations
        config: Configuration dict (scoring.explanation_threshold)

    Returns:
        Explanation
    """
    threshold = float(get_nested_config(config, 'scoring.explanation_threshold', 0.5))
    details = []

    if deviations.hesitation > threshold:
        direction = 'higher' if snapshot.hesitation_time_ms > baseline.avg_hesitation_ms else 'lower'
        details.append(f'Hesitation time before clicks is {direction} than expected for this age group.')

    if deviations.jitter > threshold:
        details.append(JITTER_SENTENCE)

    if deviations.corrections > threshold:
        details.append(
            f'{snapshot.correction_count} instances where cursor hovered over an option '
            f'but moved away without clicking.'
        )

    if deviations.speed_variance > threshold:
        details.append(SPEED_VARIANCE_SENTENCE)

    if not details:
        details.append(WITHIN_RANGE_SENTENCE)

    return Explanation(level=level, summary=' '.join(details), details=tuple(details))
