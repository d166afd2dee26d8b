"""
Learning-domain screening table.

Layers weighted indicators over session summaries to flag learning domains
that may deserve a closer look. This is a coarse SCREENING aid, not a
diagnosis: every elevated result requires professional evaluation. It is
kept separate from, and never merged into, the friction classification.

Indicator status (per indicator, against age-banded expectations):
- typical: |deviation| <= 50% of tolerance
- watch: |deviation| > 50% of tolerance
- screen: |deviation| > tolerance

Domain status (weighted mean of 0 / 0.5 / 1 indicator scores):
- typical: <= 0.3
- watch: > 0.3
- screen: > 0.6
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

TYPICAL = 'typical'
WATCH = 'watch'
SCREEN = 'screen'

_STATUS_SCORE = {TYPICAL: 0.0, WATCH: 0.5, SCREEN: 1.0}

# Domain -> weighted indicators
DETECTION_SIGNATURES: Dict[str, Dict[str, Any]] = {
    'dyslexia': {
        'name': 'Dyslexia Indicators',
        'description': 'Phonological processing and reading patterns',
        'indicators': {
            'letter_reversal': (0.25, 'Letter Confusion (b/d/p/q)'),
            'reading_hesitation': (0.20, 'Reading Hesitation'),
            'phoneme_errors': (0.20, 'Sound-Letter Mapping'),
            'rhyming_difficulty': (0.15, 'Rhyming Patterns'),
            'word_recall': (0.20, 'Word Retrieval Speed'),
        },
        'recommendation': 'Comprehensive phonological awareness assessment',
    },
    'dyscalculia': {
        'name': 'Dyscalculia Indicators',
        'description': 'Numerical cognition and math processing',
        'indicators': {
            'number_sequencing': (0.25, 'Number Sequencing'),
            'quantity_estimation': (0.20, 'Quantity Estimation'),
            'math_fact_recall': (0.25, 'Math Fact Recall'),
            'counting_errors': (0.15, 'Counting Accuracy'),
            'spatial_math': (0.15, 'Spatial-Numerical Reasoning'),
        },
        'recommendation': 'Mathematical cognition assessment',
    },
    'adhd': {
        'name': 'Attention/Focus Indicators',
        'description': 'Executive function and attention regulation',
        'indicators': {
            'sustained_attention': (0.25, 'Sustained Attention'),
            'impulse_control': (0.25, 'Impulse Control'),
            'gaze_stability': (0.20, 'Visual Attention'),
            'task_switching': (0.15, 'Task Transition'),
            'motor_restlessness': (0.15, 'Motor Activity Patterns'),
        },
        'recommendation': 'Attention and executive function evaluation',
    },
    'auditory_processing': {
        'name': 'Auditory Processing Indicators',
        'description': 'Speech perception and verbal processing',
        'indicators': {
            'speech_fluency': (0.25, 'Speech Fluency'),
            'verbal_instructions': (0.25, 'Verbal Instruction Following'),
            'auditory_memory': (0.20, 'Auditory Memory'),
            'sound_discrimination': (0.15, 'Sound Discrimination'),
            'filler_usage': (0.15, 'Verbal Hesitation Patterns'),
        },
        'recommendation': 'Auditory processing evaluation',
    },
    'visual_processing': {
        'name': 'Visual Processing Indicators',
        'description': 'Visual perception and pattern recognition',
        'indicators': {
            'pattern_recognition': (0.30, 'Pattern Recognition'),
            'shape_matching': (0.25, 'Shape Matching'),
            'visual_memory': (0.25, 'Visual Memory'),
            'spatial_orientation': (0.20, 'Spatial Orientation'),
        },
        'recommendation': 'Visual-perceptual assessment',
    },
}

# Indicators where a higher observed value is better
HIGHER_IS_BETTER = frozenset({
    'sustained_attention', 'gaze_stability', 'speech_fluency',
    'pattern_recognition', 'shape_matching', 'rhyming_difficulty',
    'number_sequencing', 'verbal_instructions', 'auditory_memory',
    'sound_discrimination', 'visual_memory', 'spatial_orientation', 'spatial_math',
})

# Age band -> indicator -> (expected, tolerance)
SCREENING_BASELINES: Dict[str, Dict[str, tuple]] = {
    '6-8': {
        'letter_reversal': (1, 1), 'reading_hesitation': (2500, 800),
        'phoneme_errors': (2, 1), 'rhyming_difficulty': (0.7, 0.15),
        'word_recall': (3000, 1000), 'number_sequencing': (0.8, 0.15),
        'quantity_estimation': (2, 1), 'math_fact_recall': (4000, 1500),
        'counting_errors': (1, 1), 'spatial_math': (0.7, 0.15),
        'sustained_attention': (0.6, 0.15), 'impulse_control': (2, 1),
        'gaze_stability': (0.6, 0.15), 'task_switching': (3000, 1000),
        'motor_restlessness': (50, 20), 'speech_fluency': (100, 30),
        'verbal_instructions': (0.7, 0.15), 'auditory_memory': (3, 1),
        'sound_discrimination': (0.7, 0.15), 'filler_usage': (5, 3),
        'pattern_recognition': (0.7, 0.15), 'shape_matching': (0.8, 0.15),
        'visual_memory': (3, 1), 'spatial_orientation': (0.7, 0.15),
    },
    '9-11': {
        'letter_reversal': (0, 1), 'reading_hesitation': (1800, 600),
        'phoneme_errors': (1, 1), 'rhyming_difficulty': (0.85, 0.1),
        'word_recall': (2000, 800), 'number_sequencing': (0.9, 0.1),
        'quantity_estimation': (1, 1), 'math_fact_recall': (3000, 1000),
        'counting_errors': (0, 1), 'spatial_math': (0.8, 0.1),
        'sustained_attention': (0.7, 0.1), 'impulse_control': (1, 1),
        'gaze_stability': (0.7, 0.1), 'task_switching': (2000, 800),
        'motor_restlessness': (30, 15), 'speech_fluency': (120, 25),
        'verbal_instructions': (0.8, 0.1), 'auditory_memory': (4, 1),
        'sound_discrimination': (0.8, 0.1), 'filler_usage': (3, 2),
        'pattern_recognition': (0.8, 0.1), 'shape_matching': (0.9, 0.1),
        'visual_memory': (4, 1), 'spatial_orientation': (0.8, 0.1),
    },
    '12+': {
        'letter_reversal': (0, 0), 'reading_hesitation': (1200, 400),
        'phoneme_errors': (0, 1), 'rhyming_difficulty': (0.95, 0.05),
        'word_recall': (1500, 500), 'number_sequencing': (0.95, 0.05),
        'quantity_estimation': (0, 1), 'math_fact_recall': (2000, 800),
        'counting_errors': (0, 0), 'spatial_math': (0.9, 0.1),
        'sustained_attention': (0.8, 0.1), 'impulse_control': (0, 1),
        'gaze_stability': (0.8, 0.1), 'task_switching': (1500, 500),
        'motor_restlessness': (20, 10), 'speech_fluency': (140, 20),
        'verbal_instructions': (0.9, 0.1), 'auditory_memory': (5, 1),
        'sound_discrimination': (0.9, 0.1), 'filler_usage': (2, 1),
        'pattern_recognition': (0.9, 0.1), 'shape_matching': (0.95, 0.05),
        'visual_memory': (5, 1), 'spatial_orientation': (0.9, 0.1),
    },
}


@dataclass
class IndicatorResult:
    """One indicator compared with its age-band expectation."""
    indicator: str
    label: str
    weight: float
    observed: float
    expected: float
    deviation_percent: int
    status: str


@dataclass
class DomainResult:
    """Weighted screening outcome for one learning domain."""
    domain: str
    name: str
    overall_score: int  # 0-100
    overall_status: str
    elevated_count: int
    data_available: bool
    recommendation: str
    indicators: Dict[str, IndicatorResult] = field(default_factory=dict)


def screening_age_group(age) -> str:
    """Map a numeric age to a screening age band."""
    try:
        years = int(age)
    except (TypeError, ValueError):
        return '12+'
    if 6 <= years <= 8:
        return '6-8'
    if 9 <= years <= 11:
        return '9-11'
    return '12+'


def age_for_group(age_group: Optional[str]) -> Optional[int]:
    """Youngest age of a baseline group key ('9-11' -> 9, '15+' -> 15)."""
    digits = ''
    for ch in str(age_group or ''):
        if not ch.isdigit():
            break
        digits += ch
    return int(digits) if digits else None


def classify_indicator(observed: float, expected: float, tolerance: float, higher_is_better: bool = False) -> Dict[str, Any]:
    """
    Compare an observed indicator with its expectation.

    Deviation is signed percent of the expectation, positive meaning worse.
    A zero expectation scores against a unit denominator.

    Returns:
        Dictionary with deviation_percent and status
    """
    denominator = expected if expected != 0 else 1.0
    if higher_is_better:
        deviation = (expected - observed) / denominator * 100.0
    else:
        deviation = (observed - expected) / denominator * 100.0

    magnitude = abs(deviation)
    status = TYPICAL
    if magnitude > tolerance * 100.0 * 0.5:
        status = WATCH
    if magnitude > tolerance * 100.0:
        status = SCREEN

    return {'deviation_percent': int(round(deviation)), 'status': status}


def analyze_domains(indicator_values: Mapping[str, Optional[float]], age) -> Dict[str, DomainResult]:
    """
    Score every learning domain from observed indicator values.

    Indicators missing from ``indicator_values`` (or None) are skipped.

    Args:
        indicator_values: Indicator name -> observed value
        age: Numeric age of the learner

    Returns:
        Domain key -> DomainResult
    """
    band = screening_age_group(age)
    baselines = SCREENING_BASELINES[band]
    results = {}

    for domain, signature in DETECTION_SIGNATURES.items():
        indicators = {}
        total_score = 0.0
        total_weight = 0.0

        for indicator, (weight, label) in signature['indicators'].items():
            observed = indicator_values.get(indicator)
            if observed is None or indicator not in baselines:
                continue

            expected, tolerance = baselines[indicator]
            outcome = classify_indicator(observed, expected, tolerance, indicator in HIGHER_IS_BETTER)

            indicators[indicator] = IndicatorResult(
                indicator=indicator,
                label=label,
                weight=weight,
                observed=float(observed),
                expected=float(expected),
                deviation_percent=outcome['deviation_percent'],
                status=outcome['status'],
            )
            total_score += _STATUS_SCORE[outcome['status']] * weight
            total_weight += weight

        overall = total_score / total_weight if total_weight > 0 else 0.0
        status = TYPICAL
        if overall > 0.3:
            status = WATCH
        if overall > 0.6:
            status = SCREEN

        results[domain] = DomainResult(
            domain=domain,
            name=signature['name'],
            overall_score=int(round(overall * 100)),
            overall_status=status,
            elevated_count=sum(1 for r in indicators.values() if r.status != TYPICAL),
            data_available=bool(indicators),
            recommendation=signature['recommendation'],
            indicators=indicators,
        )

    logger.info(
        f"Domain screening ({band}): "
        + ", ".join(f"{k}={r.overall_status}" for k, r in results.items() if r.data_available)
    )
    return results


def indicators_from_result(result) -> Dict[str, float]:
    """Indicator values a pointer session can supply on its own."""
    return {
        'impulse_control': float(result.metrics.correction_count),
        'motor_restlessness': float(result.raw_counts.movement_count),
    }


def get_screening_priority(results: Mapping[str, DomainResult]) -> Dict[str, Any]:
    """Overall follow-up priority across all screened domains."""
    screen_areas = [r.name for r in results.values() if r.overall_status == SCREEN]
    watch_count = sum(1 for r in results.values() if r.overall_status == WATCH)

    if len(screen_areas) >= 2:
        return {'priority': 'HIGH', 'reason': 'Multiple areas require screening', 'areas': screen_areas}
    if screen_areas:
        return {'priority': 'HIGH', 'reason': 'Elevated indicators in key domain', 'areas': screen_areas}
    if watch_count >= 3:
        return {'priority': 'MEDIUM', 'reason': 'Multiple areas showing patterns', 'areas': []}
    if watch_count >= 1:
        return {'priority': 'LOW', 'reason': 'Minor patterns observed', 'areas': []}
    return {'priority': 'NONE', 'reason': 'All areas within typical range', 'areas': []}


def generate_detection_summary(results: Mapping[str, DomainResult]) -> str:
    """Human-readable summary of elevated domains and indicators."""
    lines: List[str] = []

    for result in results.values():
        if not result.data_available:
            continue
        lines.append(
            f"{result.name}: {result.overall_status.upper()} "
            f"({result.overall_score}% concern score)"
        )
        for data in result.indicators.values():
            if data.status != TYPICAL:
                sign = '+' if data.deviation_percent > 0 else ''
                lines.append(
                    f"   - {data.label}: {data.observed:g} "
                    f"(expected {data.expected:g}, {sign}{data.deviation_percent}%)"
                )

    return '\n'.join(lines)
