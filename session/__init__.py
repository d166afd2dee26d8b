"""
Session orchestration module.

This package exposes the public contract to host UIs:
- SessionController: start/stop/reset lifecycle and the event input port
- SessionResult: immutable, serializable outcome of a session
- LiveSnapshotTimer: periodic live results while tracking
"""

from .results import RawCounts, SessionResult, build_session_result
from .live import LiveSnapshotTimer
from .controller import SessionController, SessionState

__all__ = [
    'RawCounts',
    'SessionResult',
    'build_session_result',
    'LiveSnapshotTimer',
    'SessionController',
    'SessionState',
]
