"""Asyncio tick source driving a FocusSession once per interval."""

import asyncio

from models.focus_types import SessionStatus
from utils.logger import get_logger

from .focus_session import FocusSession

logger = get_logger(__name__)


class SessionClock:
    """
    One ticking task per locked session.

    The task is torn down on pause/end and recreated on resume. At most one
    task exists at a time, and FocusSession ignores ticks outside LOCKED, so
    a stop/start cycle never double-counts a second.
    """

    def __init__(self, session: FocusSession, interval_s: float = 1.0):
        self.session = session
        self.interval_s = interval_s
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Must be called from inside a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(
            "Session clock started",
            extra={"extra_fields": {"identity": self.session.identity}},
        )

    def stop(self) -> None:
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
        self._task = None
        logger.debug(
            "Session clock stopped",
            extra={"extra_fields": {"identity": self.session.identity}},
        )

    async def _run(self) -> None:
        while self.session.status is SessionStatus.LOCKED:
            await asyncio.sleep(self.interval_s)
            self.session.tick()
