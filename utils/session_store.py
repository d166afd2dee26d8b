"""
Session result store for Friction Scope.

Keeps one snapshot per completed session so results can be displayed and
compared later.

Key features:
- SQLite file, one row per completed session
- Headline values in columns for listing and statistics
- Full SessionResult as JSON for lossless read-back
- Keyed by session id, ordered by completion timestamp
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from session.results import SessionResult

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Result store manager.

    Usage:
        store = SessionStore("data/results/friction_scope.db")
        store.save_result("session_01", result, learner_id="learner_01")
        store.get_result("session_01")
    """

    def __init__(self, db_path: str = "data/results/friction_scope.db"):
        """
        Initialize result store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_database()

        logger.info(f"Session store initialized: {self.db_path}")

    def _init_database(self):
        """Create tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS session_results (
                    session_id TEXT PRIMARY KEY,
                    completed_at TEXT NOT NULL,
                    learner_id TEXT,
                    task_type TEXT,
                    age_group TEXT NOT NULL,
                    friction_level TEXT NOT NULL,

                    -- Headline metrics
                    jitter_score REAL,
                    hesitation_time_ms REAL,
                    correction_count INTEGER,
                    idle_with_motion_time_ms REAL,
                    speed_variance REAL,
                    session_duration_ms REAL,

                    result_json TEXT NOT NULL,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_session_results_completed
                ON session_results(completed_at)
            """)

            conn.commit()

    def save_result(
        self,
        session_id: str,
        result: SessionResult,
        learner_id: Optional[str] = None,
        task_type: Optional[str] = None
    ):
        """
        Save a completed session result. Saving the same id again replaces it.

        Args:
            session_id: Session identifier
            result: SessionResult to store
            learner_id: Optional learner identifier
            task_type: Optional task type
        """
        completed_ms = result.completed_at_ms
        if completed_ms is None:
            completed_at = datetime.now(timezone.utc).isoformat()
        else:
            completed_at = datetime.fromtimestamp(completed_ms / 1000.0, tz=timezone.utc).isoformat()

        metrics = result.metrics

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                INSERT OR REPLACE INTO session_results (
                    session_id, completed_at, learner_id, task_type,
                    age_group, friction_level,
                    jitter_score, hesitation_time_ms, correction_count,
                    idle_with_motion_time_ms, speed_variance, session_duration_ms,
                    result_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                session_id,
                completed_at,
                learner_id,
                task_type,
                result.age_group,
                result.friction_level.value,
                metrics.jitter_score,
                metrics.hesitation_time_ms,
                metrics.correction_count,
                metrics.idle_with_motion_time_ms,
                metrics.speed_variance,
                result.session_duration_ms,
                json.dumps(result.to_dict()),
            ))

            conn.commit()
            logger.info(f"✓ Session result saved: {session_id} ({result.friction_level.value})")

    def get_result(self, session_id: str) -> Optional[SessionResult]:
        """
        Retrieve a stored session result.

        Returns:
            SessionResult or None if not found
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT result_json FROM session_results WHERE session_id = ?",
                (session_id,)
            )
            row = cursor.fetchone()

        if not row:
            return None

        return SessionResult.from_dict(json.loads(row[0]))

    def list_results(self, limit: int = 100, offset: int = 0) -> List[Dict]:
        """
        List recent session summaries, newest first.

        Args:
            limit: Maximum number of sessions to return
            offset: Number of sessions to skip
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()

            cursor.execute("""
                SELECT
                    session_id, completed_at, learner_id, task_type,
                    age_group, friction_level,
                    jitter_score, hesitation_time_ms, correction_count,
                    idle_with_motion_time_ms, speed_variance, session_duration_ms
                FROM session_results
                ORDER BY completed_at DESC
                LIMIT ? OFFSET ?
            """, (limit, offset))

            return [dict(row) for row in cursor.fetchall()]

    def get_statistics(self) -> Dict:
        """Aggregate statistics across all stored sessions."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT COUNT(*) FROM session_results")
            total_sessions = cursor.fetchone()[0]

            cursor.execute("""
                SELECT
                    AVG(jitter_score),
                    AVG(hesitation_time_ms),
                    AVG(correction_count),
                    AVG(speed_variance)
                FROM session_results
            """)
            averages = cursor.fetchone()

            cursor.execute("""
                SELECT friction_level, COUNT(*)
                FROM session_results
                GROUP BY friction_level
            """)
            by_level = {level: count for level, count in cursor.fetchall()}

        return {
            'total_sessions': total_sessions,
            'avg_jitter_score': averages[0],
            'avg_hesitation_time_ms': averages[1],
            'avg_correction_count': averages[2],
            'avg_speed_variance': averages[3],
            'friction_levels': {
                level: by_level.get(level, 0) for level in ('low', 'medium', 'high')
            },
        }
