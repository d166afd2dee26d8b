"""
Unit tests for event log replay.
"""

import json

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from main import load_event_log, main, replay_session
from utils.config_loader import DEFAULT_CONFIG


class TestEventLog:
    """Test event log loading."""

    def test_plain_list(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps([{'kind': 'move', 'x': 0, 'y': 0, 'timestamp_ms': 0}]))
        assert len(load_event_log(str(path))['events']) == 1

    def test_object_with_metadata(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps({'age_group': '12-14', 'events': []}))
        log = load_event_log(str(path))
        assert log['age_group'] == '12-14'

    def test_missing_events_key(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps({'moves': []}))
        with pytest.raises(ValueError):
            load_event_log(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_event_log(str(tmp_path / "nope.json"))


class TestReplay:
    """Test replaying recorded sessions."""

    def test_replay_uses_event_timestamps(self):
        events = [
            {'kind': 'hover_enter', 'target_id': 'opt-a', 'timestamp_ms': 1000},
            {'kind': 'click', 'target_id': 'opt-a', 'timestamp_ms': 2800},
        ]
        result = replay_session(events, '9-11', DEFAULT_CONFIG)

        assert result.is_final
        assert result.session_duration_ms == 1800
        assert result.metrics.hesitation_time_ms == 1800

    def test_replay_with_explicit_bounds(self):
        result = replay_session([], '9-11', DEFAULT_CONFIG, session_start_ms=0, session_end_ms=30000)
        assert result.session_duration_ms == 30000
        assert result.friction_level.value == 'low'


class TestCommandLine:
    """Test the command-line entry point."""

    def test_prompt_includes_screening(self, tmp_path, monkeypatch):
        events = []
        for i in range(8):
            events.append({'kind': 'hover_enter', 'target_id': f'opt-{i}', 'timestamp_ms': i * 1000})
            events.append({'kind': 'hover_leave', 'target_id': f'opt-{i}', 'timestamp_ms': i * 1000 + 500})
        log_path = tmp_path / "events.json"
        log_path.write_text(json.dumps({'age_group': '9-11', 'events': events}))

        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, 'argv', [
            'friction-scope',
            '--events', str(log_path),
            '--output', str(tmp_path / "result.json"),
            '--prompt', str(tmp_path / "prompt.txt"),
            '--age', '10',
        ])
        with pytest.raises(SystemExit) as exit_info:
            main()

        assert exit_info.value.code == 0
        prompt = (tmp_path / "prompt.txt").read_text(encoding='utf-8')
        assert 'SCREENING PRIORITY: HIGH' in prompt
        assert 'Impulse Control: 8' in prompt
