"""
Unit tests for the learning-domain screening table.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoring.screening import (
    DETECTION_SIGNATURES,
    SCREEN,
    TYPICAL,
    WATCH,
    age_for_group,
    analyze_domains,
    classify_indicator,
    generate_detection_summary,
    get_screening_priority,
    indicators_from_result,
    screening_age_group,
)
from session import SessionController


class TestIndicatorClassification:
    """Test per-indicator status."""

    def test_at_expectation_is_typical(self):
        outcome = classify_indicator(1800, 1800, 600)
        assert outcome == {'deviation_percent': 0, 'status': TYPICAL}

    def test_higher_is_better_inverts_sign(self):
        outcome = classify_indicator(0.35, 0.7, 0.1, higher_is_better=True)
        assert outcome['deviation_percent'] == 50
        assert outcome['status'] == SCREEN

    def test_watch_band(self):
        # 7% below expectation, tolerance 10% -> watch
        outcome = classify_indicator(0.651, 0.7, 0.1, higher_is_better=True)
        assert outcome['status'] == WATCH

    def test_zero_expectation_uses_unit_denominator(self):
        outcome = classify_indicator(3, 0, 1)
        assert outcome['deviation_percent'] == 300
        assert outcome['status'] == SCREEN


class TestDomainAnalysis:
    """Test weighted domain scoring."""

    def test_age_bands(self):
        assert screening_age_group(7) == '6-8'
        assert screening_age_group(10) == '9-11'
        assert screening_age_group(15) == '12+'
        assert screening_age_group(None) == '12+'

    def test_age_for_group(self):
        assert age_for_group('9-11') == 9
        assert age_for_group('15+') == 15
        assert age_for_group(None) is None
        assert age_for_group('adult') is None

    def test_every_domain_reported(self):
        results = analyze_domains({}, age=10)
        assert set(results) == set(DETECTION_SIGNATURES)
        assert not any(r.data_available for r in results.values())

    def test_elevated_attention_domain(self):
        results = analyze_domains({
            'sustained_attention': 0.3,
            'impulse_control': 5,
            'motor_restlessness': 30,
        }, age=10)

        adhd = results['adhd']
        assert adhd.data_available
        assert adhd.indicators['sustained_attention'].status == SCREEN
        assert adhd.indicators['impulse_control'].status == SCREEN
        assert adhd.indicators['motor_restlessness'].status == TYPICAL
        assert adhd.elevated_count == 2
        assert adhd.overall_status == SCREEN

    def test_priority(self):
        results = analyze_domains({'sustained_attention': 0.3, 'impulse_control': 5}, age=10)
        priority = get_screening_priority(results)
        assert priority['priority'] == 'HIGH'
        assert priority['areas'] == ['Attention/Focus Indicators']

    def test_priority_none_when_typical(self):
        results = analyze_domains({'impulse_control': 1}, age=10)
        assert get_screening_priority(results)['priority'] == 'NONE'

    def test_summary_lists_elevated_indicators(self):
        results = analyze_domains({'impulse_control': 5}, age=10)
        summary = generate_detection_summary(results)
        assert 'Attention/Focus Indicators: SCREEN' in summary
        assert 'Impulse Control: 5 (expected 1, +400%)' in summary


class TestSessionIndicators:
    """Test indicators derived from a pointer session."""

    def test_indicators_from_result(self):
        controller = SessionController(age_group='9-11', clock=lambda: 0.0)
        controller.start(timestamp_ms=0)
        for i in range(4):
            controller.dispatch({'kind': 'move', 'x': i * 10, 'y': 0, 'timestamp_ms': i * 10})
        result = controller.stop(timestamp_ms=100)

        assert indicators_from_result(result) == {
            'impulse_control': 0.0,
            'motor_restlessness': 3.0,
        }
