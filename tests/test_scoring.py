"""
Unit tests for friction scoring.

Tests cover:
- Baseline lookup and age-group fallback
- Deviation ratios and floors
- Friction level classification
- Explanation rules
- Category friction percentages
"""

import itertools

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from interaction_metrics import MetricsSnapshot
from scoring import (
    AGE_BASELINES,
    DEFAULT_AGE_GROUP,
    DeviationSet,
    FrictionLevel,
    UnknownAgeGroupError,
    age_group_for_age,
    calculate_category_friction,
    calculate_deviation,
    compute_deviations,
    compute_idle_motion_deviation,
    determine_friction_level,
    generate_explanation,
    get_baseline_for_age,
    require_baseline,
    resolve_age_group,
)
from scoring.explanation import JITTER_SENTENCE, SPEED_VARIANCE_SENTENCE, WITHIN_RANGE_SENTENCE


def _at_baseline(**overrides):
    values = dict(
        hesitation_time_ms=1800.0,
        jitter_score=0.3,
        correction_count=2,
        speed_variance=0.4,
    )
    values.update(overrides)
    return MetricsSnapshot(**values)


def _score(snapshot, age_group='9-11'):
    baseline = AGE_BASELINES[age_group]
    deviations = compute_deviations(snapshot, baseline)
    level = determine_friction_level(deviations)
    return deviations, level, generate_explanation(snapshot, baseline, deviations, level)


class TestBaselines:
    """Test baseline lookup."""

    def test_nine_to_eleven_row(self):
        baseline = AGE_BASELINES['9-11']
        assert baseline.avg_hesitation_ms == 1800
        assert baseline.avg_jitter_score == 0.3
        assert baseline.avg_corrections == 2
        assert baseline.avg_speed_variance == 0.4

    def test_strict_lookup_raises(self):
        with pytest.raises(UnknownAgeGroupError):
            require_baseline('3-5')

    def test_unknown_group_falls_back_to_default(self, caplog):
        assert resolve_age_group('adult') == DEFAULT_AGE_GROUP
        assert get_baseline_for_age('adult') == AGE_BASELINES[DEFAULT_AGE_GROUP]
        assert 'Unknown age group' in caplog.text

    def test_fallback_uses_configured_default(self):
        config = {'scoring': {'default_age_group': '12-14'}}
        assert resolve_age_group(None, config) == '12-14'

    def test_age_mapping(self):
        assert age_group_for_age(5) == '6-8'
        assert age_group_for_age(10) == '9-11'
        assert age_group_for_age(13) == '12-14'
        assert age_group_for_age(30) == '15+'
        assert age_group_for_age('unknown') == DEFAULT_AGE_GROUP


class TestDeviation:
    """Test deviation ratios."""

    def test_basic_ratio(self):
        assert calculate_deviation(8, 2, 1.0) == 3.0

    def test_floor_applies_to_small_baseline(self):
        assert calculate_deviation(0.2, 0.0, 0.1) == pytest.approx(2.0)

    def test_zero_denominator(self):
        assert calculate_deviation(5, 0, 0) == 0.0

    def test_deviation_set_has_tracked_metrics_only(self):
        deviations = compute_deviations(_at_baseline(), AGE_BASELINES['9-11'])
        assert set(deviations.to_dict()) == {'hesitation', 'jitter', 'corrections', 'speed_variance'}

    def test_idle_motion_deviation(self):
        snapshot = _at_baseline(idle_with_motion_time_ms=6000.0)
        assert compute_idle_motion_deviation(snapshot, AGE_BASELINES['9-11']) == pytest.approx(1.0)


class TestFrictionLevel:
    """Test friction classification."""

    def test_all_at_baseline_is_low(self):
        deviations, level, explanation = _score(_at_baseline())

        assert deviations == DeviationSet()
        assert level == FrictionLevel.LOW
        assert explanation.details == (WITHIN_RANGE_SENTENCE,)
        assert explanation.summary == WITHIN_RANGE_SENTENCE

    def test_excess_corrections_is_high(self):
        deviations, level, _ = _score(_at_baseline(correction_count=8))

        assert deviations.corrections == 3.0
        assert deviations.mean == 0.75
        assert level == FrictionLevel.HIGH

    def test_idle_motion_does_not_change_level(self):
        _, level, _ = _score(_at_baseline(idle_with_motion_time_ms=60000.0))
        assert level == FrictionLevel.LOW

    @pytest.mark.parametrize("mean,expected", [
        (0.0, FrictionLevel.LOW),
        (0.29, FrictionLevel.LOW),
        (0.3, FrictionLevel.MEDIUM),
        (0.69, FrictionLevel.MEDIUM),
        (0.7, FrictionLevel.HIGH),
        (2.5, FrictionLevel.HIGH),
    ])
    def test_boundaries(self, mean, expected):
        assert determine_friction_level({'a': mean}) == expected

    def test_empty_mapping_is_low(self):
        assert determine_friction_level({}) == FrictionLevel.LOW

    def test_order_independent(self):
        values = {'hesitation': 0.1, 'jitter': 0.9, 'corrections': 0.4, 'speed_variance': 0.6}
        levels = {
            determine_friction_level(dict(order))
            for order in itertools.permutations(values.items())
        }
        assert levels == {FrictionLevel.MEDIUM}

    def test_thresholds_from_config(self):
        config = {'scoring': {'friction_thresholds': {'low': 0.1, 'medium': 0.2}}}
        assert determine_friction_level({'a': 0.15}, config) == FrictionLevel.MEDIUM


class TestExplanation:
    """Test explanation rules."""

    def test_high_hesitation_sentence(self):
        _, _, explanation = _score(_at_baseline(hesitation_time_ms=3600.0))
        assert explanation.details == (
            'Hesitation time before clicks is higher than expected for this age group.',
        )

    def test_no_hesitation_reads_lower(self):
        _, _, explanation = _score(_at_baseline(hesitation_time_ms=0.0))
        assert 'lower than expected' in explanation.details[0]

    def test_rule_order_is_fixed(self):
        snapshot = _at_baseline(
            hesitation_time_ms=5000.0,
            jitter_score=0.9,
            correction_count=9,
            speed_variance=1.0,
        )
        _, level, explanation = _score(snapshot)

        assert level == FrictionLevel.HIGH
        assert len(explanation.details) == 4
        assert explanation.details[0].startswith('Hesitation')
        assert explanation.details[1] == JITTER_SENTENCE
        assert explanation.details[2] == (
            '9 instances where cursor hovered over an option but moved away without clicking.'
        )
        assert explanation.details[3] == SPEED_VARIANCE_SENTENCE

    def test_medium_deviation_below_narrative_bar(self):
        # Deviations of 0.4 and 0.5: medium friction, nothing worth narrating
        snapshot = _at_baseline(
            hesitation_time_ms=1800.0 * 1.4,
            jitter_score=0.3 * 1.4,
            correction_count=3,
            speed_variance=0.4 * 1.4,
        )
        _, level, explanation = _score(snapshot)
        assert level == FrictionLevel.MEDIUM
        assert explanation.details == (WITHIN_RANGE_SENTENCE,)

    def test_dict_roundtrip(self):
        _, _, explanation = _score(_at_baseline(correction_count=8))
        restored = type(explanation).from_dict(explanation.to_dict())
        assert restored == explanation


class TestCategoryFriction:
    """Test category friction percentages."""

    def test_zero_deviation(self):
        assert calculate_category_friction(DeviationSet()) == {'reading': 0, 'attention': 0, 'memory': 0}

    def test_mixed_deviation(self):
        deviations = DeviationSet(hesitation=0.5, jitter=0.2, corrections=0.1, speed_variance=0.3)
        assert calculate_category_friction(deviations, idle_motion_deviation=0.4) == {
            'reading': 30,
            'attention': 30,
            'memory': 20,
        }

    def test_capped_at_hundred(self):
        deviations = DeviationSet(corrections=3.0, hesitation=2.0)
        assert calculate_category_friction(deviations)['reading'] == 100

    def test_rounds_half_up(self):
        deviations = DeviationSet(hesitation=0.25, corrections=0.0)
        assert calculate_category_friction(deviations)['reading'] == 13
