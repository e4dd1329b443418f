"""
FocusSession - lock/pause/resume/expire lifecycle for one user's focus session.

    IDLE --start--> LOCKED --tick x N--> ENDED --reset--> IDLE
                      |  ^
      request_pause   |  |  resume
      (verified)      v  |
                     PAUSED --end--> ENDED

Only pausing is credential-gated; resuming is not. Commands that do not apply
in the current state return NOT_APPLICABLE and never raise. All mutations are
serialized through one lock so ticks and commands apply in arrival order.
"""

import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from models.errors import CredentialRejected
from models.focus_types import (
    SessionAction,
    SessionSnapshot,
    SessionStatus,
    TransitionResult,
    TransitionStatus,
)
from utils.logger import get_logger

logger = get_logger(__name__)

EndCallback = Callable[[SessionSnapshot], None]

PERMITTED_STATES: dict[SessionAction, frozenset[SessionStatus]] = {
    SessionAction.START: frozenset({SessionStatus.IDLE}),
    SessionAction.PAUSE: frozenset({SessionStatus.LOCKED}),
    SessionAction.RESUME: frozenset({SessionStatus.PAUSED}),
    SessionAction.END: frozenset({SessionStatus.LOCKED, SessionStatus.PAUSED}),
    SessionAction.RESET: frozenset({SessionStatus.ENDED}),
    SessionAction.SEARCH: frozenset({SessionStatus.LOCKED}),
}


class CredentialVerifier(Protocol):
    def verify(self, identity: str, secret: str) -> bool: ...


def duration_to_seconds(hours: int, minutes: int) -> int:
    """Convert an hours/minutes picker value to seconds (minutes clamped to 0..59)."""
    hours = max(0, int(hours))
    minutes = max(0, min(59, int(minutes)))
    return hours * 3600 + minutes * 60


class FocusSession:
    def __init__(
        self,
        identity: str,
        verifier: CredentialVerifier,
        now_fn: Callable[[], datetime] | None = None,
    ):
        self.identity = identity
        self._verifier = verifier
        self._now = now_fn or (lambda: datetime.now(timezone.utc))
        self._lock = threading.RLock()
        self._end_callbacks: list[EndCallback] = []

        self._status = SessionStatus.IDLE
        self._remaining = 0
        self._total = 0
        self._started_at: datetime | None = None
        self._pause_pending = False
        self._end_signalled = False

    # ---------- queries ----------

    @property
    def status(self) -> SessionStatus:
        with self._lock:
            return self._status

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                status=self._status,
                remaining_seconds=self._remaining,
                total_seconds=self._total,
                started_at=self._started_at,
                pause_pending=self._pause_pending,
            )

    def permits(self, action: SessionAction) -> bool:
        with self._lock:
            if action is SessionAction.PAUSE and self._pause_pending:
                return False
            return self._status in PERMITTED_STATES[action]

    def on_end(self, callback: EndCallback) -> Callable[[], None]:
        """Register an end-of-session listener. Returns an unsubscribe function."""
        with self._lock:
            self._end_callbacks.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._end_callbacks:
                    self._end_callbacks.remove(callback)

        return _unsubscribe

    # ---------- commands ----------

    def start(self, total_seconds: int) -> TransitionResult:
        with self._lock:
            if self._status is not SessionStatus.IDLE:
                return self._not_applicable(SessionAction.START)
            # Whole seconds only; a fractional duration under one second is zero.
            total_seconds = int(total_seconds)
            if total_seconds <= 0:
                return TransitionResult(
                    status=TransitionStatus.INVALID_INPUT,
                    snapshot=self.snapshot(),
                    reason="Session duration must be greater than zero.",
                )

            self._status = SessionStatus.LOCKED
            self._total = total_seconds
            self._remaining = total_seconds
            self._started_at = self._now()
            self._pause_pending = False
            self._end_signalled = False
            logger.info(
                "Focus session locked",
                extra={"extra_fields": {"identity": self.identity, "total_seconds": self._total}},
            )
            return self._applied()

    def start_duration(self, hours: int, minutes: int) -> TransitionResult:
        return self.start(duration_to_seconds(hours, minutes))

    def tick(self) -> TransitionResult:
        with self._lock:
            if self._status is not SessionStatus.LOCKED:
                return self._not_applicable(None)

            self._remaining -= 1
            if self._remaining > 0:
                return self._applied()

            self._remaining = 0
            ended = self._enter_ended("expired")
            result = self._applied()

        self._fire_end(ended)
        return result

    def request_pause(self, secret: str) -> TransitionResult:
        """
        Pause the session after the credential verifier accepts ``secret``.

        Raises:
            CredentialRejected: Verification failed; the session stays LOCKED
        """
        with self._lock:
            if self._status is not SessionStatus.LOCKED or self._pause_pending:
                return self._not_applicable(SessionAction.PAUSE)
            self._pause_pending = True

        try:
            verified = bool(self._verifier.verify(self.identity, secret))
        finally:
            with self._lock:
                self._pause_pending = False

        with self._lock:
            if not verified:
                logger.warning(
                    "Pause rejected: credential verification failed",
                    extra={
                        "extra_fields": {
                            "identity": self.identity,
                            "remaining_seconds": self._remaining,
                        }
                    },
                )
                raise CredentialRejected(details={"status": self._status.value})

            # The session may have expired or ended while verification ran.
            if self._status is not SessionStatus.LOCKED:
                return self._not_applicable(SessionAction.PAUSE)

            self._status = SessionStatus.PAUSED
            logger.info(
                "Focus session paused",
                extra={
                    "extra_fields": {"identity": self.identity, "remaining_seconds": self._remaining}
                },
            )
            return self._applied()

    def resume(self) -> TransitionResult:
        with self._lock:
            if self._status is not SessionStatus.PAUSED:
                return self._not_applicable(SessionAction.RESUME)
            self._status = SessionStatus.LOCKED
            logger.info(
                "Focus session resumed",
                extra={
                    "extra_fields": {"identity": self.identity, "remaining_seconds": self._remaining}
                },
            )
            return self._applied()

    def end(self) -> TransitionResult:
        with self._lock:
            if self._status not in PERMITTED_STATES[SessionAction.END]:
                return self._not_applicable(SessionAction.END)
            ended = self._enter_ended("ended")
            result = self._applied()

        self._fire_end(ended)
        return result

    def reset(self) -> TransitionResult:
        with self._lock:
            if self._status is not SessionStatus.ENDED:
                return self._not_applicable(SessionAction.RESET)
            self._status = SessionStatus.IDLE
            self._remaining = 0
            self._total = 0
            self._started_at = None
            self._pause_pending = False
            self._end_signalled = False
            return self._applied()

    # ---------- helpers ----------

    def _applied(self) -> TransitionResult:
        return TransitionResult(status=TransitionStatus.APPLIED, snapshot=self.snapshot())

    def _not_applicable(self, action: SessionAction | None) -> TransitionResult:
        label = action.value if action else "tick"
        logger.debug(
            f"Ignored '{label}' in state {self._status.value}",
            extra={"extra_fields": {"identity": self.identity}},
        )
        return TransitionResult(
            status=TransitionStatus.NOT_APPLICABLE,
            snapshot=self.snapshot(),
            reason=f"Cannot {label} while session is {self._status.value.lower()}.",
        )

    def _enter_ended(self, cause: str) -> SessionSnapshot | None:
        """Move to ENDED; returns the snapshot to signal, or None if already signalled."""
        self._status = SessionStatus.ENDED
        self._pause_pending = False
        logger.info(
            f"Focus session {cause}",
            extra={
                "extra_fields": {
                    "identity": self.identity,
                    "total_seconds": self._total,
                    "remaining_seconds": self._remaining,
                }
            },
        )
        if self._end_signalled:
            return None
        self._end_signalled = True
        return self.snapshot()

    def _fire_end(self, snapshot: SessionSnapshot | None) -> None:
        if snapshot is None:
            return
        with self._lock:
            callbacks = list(self._end_callbacks)
        for callback in callbacks:
            try:
                callback(snapshot)
            except Exception:
                logger.exception(
                    "End-of-session callback failed",
                    extra={"extra_fields": {"identity": self.identity}},
                )
