"""
Periodic live snapshots.

While a session is tracking, the host may want metrics every few hundred
milliseconds. LiveSnapshotTimer runs on the host's asyncio event loop
alongside event dispatch, so no locking is needed. cancel() takes effect
immediately: no callback runs after it returns.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class LiveSnapshotTimer:
    """
    Call ``callback(produce())`` every ``interval_ms`` on the running loop.

    Usage:
        timer = LiveSnapshotTimer(500, controller.live_snapshot, on_snapshot)
        timer.start()   # inside a running event loop
        ...
        timer.cancel()
    """

    def __init__(
        self,
        interval_ms: float,
        produce: Callable[[], Any],
        callback: Callable[[Any], None],
    ):
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.interval_ms = float(interval_ms)
        self.produce = produce
        self.callback = callback
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._cancelled

    def start(self) -> bool:
        """
        Schedule the timer on the running event loop.

        Returns:
            False if there is no running loop or the timer is already running
        """
        if self.running:
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, live snapshots disabled")
            return False

        self._cancelled = False
        self._task = loop.create_task(self._run())
        logger.debug(f"Live snapshot timer started ({self.interval_ms:.0f}ms)")
        return True

    def cancel(self) -> None:
        """Stop the timer. Safe to call repeatedly."""
        self._cancelled = True
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug("Live snapshot timer cancelled")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_ms / 1000.0)
            if self._cancelled:
                return
            try:
                self.callback(self.produce())
            except Exception as e:
                logger.warning(f"Live snapshot callback failed: {type(e).__name__}: {e}")
