"""
Prompt construction for the generative-text service.

The service call itself lives outside this repository: the host POSTs
``{model, prompt}`` and shows the free-text reply without parsing it. This
module only shapes the structured data the prompt is built from (session
metrics and the learning-domain screening), plus an offline assessment for
when the service is unavailable.

All baselines are heuristic reference values. Every assessment recommends
human review.
"""

import json
import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from scoring.deviation import compute_idle_motion_deviation
from scoring.screening import (
    age_for_group,
    analyze_domains,
    generate_detection_summary,
    get_screening_priority,
    indicators_from_result,
)
from utils.config_loader import get_nested_config

logger = logging.getLogger(__name__)

HUMAN_REVIEW = 'Human review suggested'
NO_SCREENING_DATA = 'No domain-specific analysis available'


def build_prompt_payload(
    result,
    task_type: str = 'reading_comprehension',
    learner_id: str = 'learner_01',
    config: Optional[Dict] = None
) -> Dict[str, Any]:
    """
    Structured input data for the prompt.

    Args:
        result: SessionResult
        task_type: Kind of task the learner performed
        learner_id: Synthetic learner identifier
        config: Configuration dict

    Returns:
        JSON-native dictionary
    """
    metrics = result.metrics
    baseline = result.baseline
    deviations = result.deviations.to_dict()
    deviations['idle_motion'] = (
        compute_idle_motion_deviation(metrics, baseline, config)
        if any(result.raw_counts.to_dict().values()) else 0.0
    )

    return {
        'learner_id': learner_id,
        'age_group': result.age_group,
        'task_type': task_type,
        'live_metrics': {
            'hesitation_ms': metrics.hesitation_time_ms,
            'jitter_score': metrics.jitter_score,
            'corrections': metrics.correction_count,
            'idle_motion_ms': metrics.idle_with_motion_time_ms,
            'speed_variance': metrics.speed_variance,
            'task_duration_sec': int(round(result.session_duration_ms / 1000.0)),
        },
        'baseline_reference': {
            'hesitation_ms': baseline.avg_hesitation_ms,
            'jitter_score': baseline.avg_jitter_score,
            'corrections': baseline.avg_corrections,
            'idle_motion_ms': baseline.avg_idle_motion_ms,
            'speed_variance': baseline.avg_speed_variance,
        },
        'calculated_deviations': deviations,
        'preliminary_friction_level': result.friction_level.value,
        'category_friction': dict(result.category_friction),
    }


def build_screening_report(result, age: Optional[int] = None) -> Dict[str, Any]:
    """
    Learning-domain screening over the indicators a session supplies.

    Kept apart from the friction level: a screening flag only says a
    domain may deserve a closer look by a professional.

    Args:
        result: SessionResult
        age: Learner age in years (default: youngest age of the result's group)

    Returns:
        Dictionary with age, priority, summary and per-domain results
    """
    if age is None:
        age = age_for_group(result.age_group)

    domains = analyze_domains(indicators_from_result(result), age)
    return {
        'age': age,
        'priority': get_screening_priority(domains),
        'summary': generate_detection_summary(domains) or NO_SCREENING_DATA,
        'domains': {key: asdict(domain) for key, domain in domains.items()},
    }


def generate_llm_prompt(
    result,
    task_type: str = 'reading_comprehension',
    learner_id: str = 'learner_01',
    config: Optional[Dict] = None,
    age: Optional[int] = None
) -> str:
    """Render the prompt text sent to the generative-text service."""
    payload = build_prompt_payload(result, task_type, learner_id, config)
    screening = build_screening_report(result, age)
    priority = screening['priority']

    return (
        "Analyze the following learner interaction data and provide a friction assessment.\n"
        "\n"
        "INPUT DATA:\n"
        f"{json.dumps(payload, indent=2)}\n"
        "\n"
        f"SCREENING PRIORITY: {priority['priority']} ({priority['reason']})\n"
        "DOMAIN SCREENING (screening, not diagnosis):\n"
        f"{screening['summary']}\n"
        "\n"
        f"Based on the baseline reference for age group {result.age_group}, analyze the "
        "deviations and provide your assessment in the required output format."
    )


def generate_local_assessment(result, config: Optional[Dict] = None) -> Dict[str, Any]:
    """
    Offline assessment used when the generative-text service is unavailable.

    Uses a lower inclusion bar (0.3 by default) than the session explanation,
    and states hesitation as a percentage.

    Returns:
        Dictionary with friction_level, categories, explanation, recommendation
    """
    threshold = float(get_nested_config(config, 'scoring.local_assessment_threshold', 0.3))
    deviations = result.deviations
    metrics = result.metrics
    sentences = []

    if deviations.hesitation > threshold:
        direction = 'higher' if metrics.hesitation_time_ms > result.baseline.avg_hesitation_ms else 'lower'
        percent = int(round(deviations.hesitation * 100))
        sentences.append(f'Hesitation time was {percent}% {direction} than expected for this age group.')

    if deviations.jitter > threshold:
        sentences.append('Observed elevated back-and-forth mouse movement patterns.')

    if deviations.corrections > threshold:
        sentences.append(f'{metrics.correction_count} correction patterns were observed.')

    if deviations.speed_variance > threshold:
        sentences.append('Mouse movement speed showed irregular patterns.')

    if not sentences:
        sentences.append('Interaction patterns are within expected range for this age group.')

    logger.debug(f"Local assessment generated with {len(sentences)} findings")

    return {
        'friction_level': result.friction_level.value,
        'categories': dict(result.category_friction),
        'explanation': ' '.join(sentences),
        'recommendation': HUMAN_REVIEW,
        'generated_locally': True,
    }
