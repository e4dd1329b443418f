"""Search lifecycle events and a simple observer bus."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from utils.logger import get_logger

logger = get_logger(__name__)

SearchEventKind = Literal["started", "classified", "rejected", "failed"]


@dataclass(frozen=True)
class SearchEvent:
    kind: SearchEventKind
    query: str
    generation: int
    result_count: int = 0
    blocked_count: int = 0
    reason: str = ""
    error_code: str | None = None


SearchListener = Callable[[SearchEvent], None]


class SearchEventBus:
    """
    Fan-out of search lifecycle events to any number of listeners.

    A failing listener is logged and skipped; it never breaks the search or
    the other listeners.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: list[SearchListener] = []

    def subscribe(self, listener: SearchListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: SearchEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Search event listener failed",
                    extra={"extra_fields": {"kind": event.kind, "generation": event.generation}},
                )
