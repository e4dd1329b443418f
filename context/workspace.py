"""
FocusWorkspace - one user's session, clock, search orchestrator and history.

The workspace is the seam the HTTP layer talks to. It keeps the session clock
in step with session transitions and refuses searches unless the session is
LOCKED.
"""

import threading
import time
from collections.abc import Callable

from models.errors import SessionActionNotPermitted
from models.focus_types import SearchOutcome, SessionAction, SessionStatus, TransitionResult
from models.user_context import UserContext
from orchestrator.search_orchestrator import SearchOrchestrator
from utils.logger import get_logger

from .focus_session import FocusSession
from .session_clock import SessionClock

logger = get_logger(__name__)


class FocusWorkspace:
    def __init__(
        self,
        user: UserContext,
        session: FocusSession,
        orchestrator: SearchOrchestrator,
        clock: SessionClock,
    ):
        self.user = user
        self.session = session
        self.orchestrator = orchestrator
        self.clock = clock
        self.last_active = time.monotonic()

    def touch(self, now: float | None = None) -> None:
        self.last_active = time.monotonic() if now is None else now

    def is_dormant(self) -> bool:
        """True when no session is running, so dropping the workspace loses no countdown."""
        return self.session.status in (SessionStatus.IDLE, SessionStatus.ENDED)

    def start(self, total_seconds: int) -> TransitionResult:
        result = self.session.start(total_seconds)
        if result.applied:
            self.clock.start()
        return result

    def start_duration(self, hours: int, minutes: int) -> TransitionResult:
        result = self.session.start_duration(hours, minutes)
        if result.applied:
            self.clock.start()
        return result

    def pause(self, secret: str) -> TransitionResult:
        result = self.session.request_pause(secret)
        if result.applied:
            self.clock.stop()
        return result

    def resume(self) -> TransitionResult:
        result = self.session.resume()
        if result.applied:
            self.clock.start()
        return result

    def end(self) -> TransitionResult:
        result = self.session.end()
        if result.applied:
            self.clock.stop()
        return result

    def reset(self) -> TransitionResult:
        return self.session.reset()

    async def search(self, query: str) -> SearchOutcome:
        """
        Run a gated search for this workspace's user.

        Raises:
            SessionActionNotPermitted: The session is not LOCKED
        """
        if not self.session.permits(SessionAction.SEARCH):
            raise SessionActionNotPermitted(
                "Start a focus session to search.",
                details={"status": self.session.status.value},
            )
        return await self.orchestrator.search(query, self.user.role)

    def close(self) -> None:
        self.clock.stop()


WorkspaceFactory = Callable[[UserContext], FocusWorkspace]


class WorkspaceRegistry:
    """
    Thread-safe store of one FocusWorkspace per identity.

    No two workspaces share a session or a history ledger.
    """

    def __init__(self, factory: WorkspaceFactory):
        self._factory = factory
        self._lock = threading.Lock()
        self._workspaces: dict[str, FocusWorkspace] = {}

    def get(self, identity: str) -> FocusWorkspace | None:
        with self._lock:
            return self._workspaces.get(identity)

    def get_or_create(self, user: UserContext) -> FocusWorkspace:
        with self._lock:
            workspace = self._workspaces.get(user.identity)
            if workspace is None:
                workspace = self._factory(user)
                self._workspaces[user.identity] = workspace
                logger.info(
                    "Workspace created",
                    extra={"extra_fields": {"identity": user.identity, "role": user.role.value}},
                )
            workspace.touch()
            return workspace

    def evict_idle(
        self,
        max_idle_s: float,
        keep: str | None = None,
        now: float | None = None,
    ) -> list[FocusWorkspace]:
        """
        Drop workspaces with no running session that have not been used for max_idle_s.

        Workspaces that are LOCKED or PAUSED are never evicted, however old.

        Args:
            max_idle_s: Idle time after which a dormant workspace is dropped
            keep: Identity that must survive this pass (the current caller)
            now: Monotonic timestamp to measure against (defaults to time.monotonic())

        Returns:
            The evicted workspaces, with their clocks stopped
        """
        cutoff = (time.monotonic() if now is None else now) - max_idle_s
        with self._lock:
            stale = [
                identity
                for identity, workspace in self._workspaces.items()
                if identity != keep and workspace.last_active <= cutoff and workspace.is_dormant()
            ]
            evicted = [self._workspaces.pop(identity) for identity in stale]

        for workspace in evicted:
            workspace.close()
        if evicted:
            logger.info(
                "Idle workspaces evicted",
                extra={"extra_fields": {"count": len(evicted), "max_idle_s": max_idle_s}},
            )
        return evicted

    def clear_all(self) -> None:
        """Drop all workspaces, stopping their clocks (for shutdown and tests)."""
        with self._lock:
            workspaces = list(self._workspaces.values())
            self._workspaces.clear()
        for workspace in workspaces:
            workspace.close()
