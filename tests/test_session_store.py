"""
Unit tests for the SQLite session result store.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from session import SessionController
from utils.session_store import SessionStore


def _result(corrections=0, start=0.0, end=60000.0):
    controller = SessionController(age_group='9-11', clock=lambda: 0.0)
    controller.start(timestamp_ms=start)
    for i in range(corrections):
        controller.dispatch({'kind': 'hover_enter', 'target_id': f'opt-{i}', 'timestamp_ms': start + i * 1000})
        controller.dispatch({'kind': 'hover_leave', 'target_id': f'opt-{i}', 'timestamp_ms': start + i * 1000 + 500})
    return controller.stop(timestamp_ms=end)


@pytest.fixture
def store(tmp_path):
    return SessionStore(str(tmp_path / "results" / "sessions.db"))


class TestSessionStore:
    """Test result persistence."""

    def test_creates_database(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "sessions.db"
        SessionStore(str(db_path))
        assert db_path.exists()

    def test_save_and_get(self, store):
        result = _result(corrections=8)
        store.save_result("session_a", result, learner_id="learner_07", task_type="math_quiz")

        loaded = store.get_result("session_a")
        assert loaded == result

    def test_get_missing(self, store):
        assert store.get_result("nope") is None

    def test_save_replaces_same_id(self, store):
        store.save_result("session_a", _result(corrections=8))
        store.save_result("session_a", _result(corrections=0))

        assert store.get_statistics()['total_sessions'] == 1
        assert store.get_result("session_a").metrics.correction_count == 0

    def test_list_newest_first(self, store):
        store.save_result("older", _result(end=1000.0))
        store.save_result("newer", _result(end=5000.0))

        rows = store.list_results()
        assert [row['session_id'] for row in rows] == ["newer", "older"]
        assert rows[0]['friction_level'] == 'low'

    def test_list_pagination(self, store):
        for i in range(5):
            store.save_result(f"s{i}", _result(end=1000.0 * (i + 1)))

        rows = store.list_results(limit=2, offset=1)
        assert [row['session_id'] for row in rows] == ["s3", "s2"]

    def test_statistics(self, store):
        store.save_result("calm", _result(corrections=0))
        store.save_result("busy", _result(corrections=8))

        stats = store.get_statistics()
        assert stats['total_sessions'] == 2
        assert stats['avg_correction_count'] == pytest.approx(4.0)
        assert stats['friction_levels'] == {'low': 1, 'medium': 0, 'high': 1}

    def test_statistics_empty(self, store):
        stats = store.get_statistics()
        assert stats['total_sessions'] == 0
        assert stats['avg_jitter_score'] is None
