"""
HistoryLedger - ordered record of validated search queries.

Entries are distinct and kept most-recent-first. Recording a query that is
already present moves it to the front instead of duplicating it. Identity is
exact string equality after trimming (case-sensitive).

Persistence is delegated to a HistoryStore (load/save), so the ledger never
assumes a storage medium.
"""

import os
import threading
from typing import Protocol

from utils.logger import get_logger

logger = get_logger(__name__)

RECENT_COUNT = 4


class HistoryStore(Protocol):
    def load(self) -> list[str]: ...

    def save(self, entries: list[str]) -> None: ...


class InMemoryHistoryStore:
    """Process-local store, used for guests and in tests."""

    def __init__(self, entries: list[str] | None = None):
        self._entries = list(entries or [])
        self.save_count = 0

    def load(self) -> list[str]:
        return list(self._entries)

    def save(self, entries: list[str]) -> None:
        self._entries = list(entries)
        self.save_count += 1


class HistoryLedger:
    """
    Manages search history for one focus workspace.

    Features:
    - No duplicate entries (move-to-most-recent on re-record)
    - Optional cap on stored entries (oldest dropped first)
    - Every mutation is persisted through the injected store
    """

    def __init__(self, store: HistoryStore | None = None, max_entries: int | None = None):
        """
        Initialize HistoryLedger.

        Args:
            store: Persistence collaborator. Defaults to an in-memory store.
            max_entries: Maximum number of entries to keep.
                         If None, reads from HISTORY_MAX_ENTRIES env var (default 100).
        """
        if max_entries is None:
            max_entries = int(os.getenv("HISTORY_MAX_ENTRIES", "100"))

        self.max_entries = max_entries
        self._store = store or InMemoryHistoryStore()
        self._lock = threading.Lock()
        self._entries = self._normalize(self._store.load())

        logger.info(f"Initialized HistoryLedger with {len(self._entries)} entries")

    def _normalize(self, raw: list[str]) -> list[str]:
        """Trim, drop blanks and duplicates (first occurrence wins), apply the cap."""
        seen: set[str] = set()
        entries: list[str] = []
        for item in raw:
            item = (item or "").strip()
            if item and item not in seen:
                seen.add(item)
                entries.append(item)
        return entries[: self.max_entries]

    def _persist(self) -> None:
        self._store.save(list(self._entries))

    def entries(self) -> list[str]:
        """
        Get all entries, most recent first.

        Returns:
            Copy of the ledger entries
        """
        with self._lock:
            return list(self._entries)

    def recent(self, count: int = RECENT_COUNT) -> list[str]:
        with self._lock:
            return self._entries[:count]

    def filter(self, text: str) -> list[str]:
        """Case-insensitive substring filter over the entries."""
        needle = (text or "").lower()
        with self._lock:
            return [item for item in self._entries if needle in item.lower()]

    def record(self, query: str) -> bool:
        """
        Record a validated query at the most-recent position.

        Args:
            query: The search text (trimmed before storing)

        Returns:
            True if the ledger changed
        """
        query = (query or "").strip()
        if not query:
            logger.warning("Attempted to record empty query in history")
            return False

        with self._lock:
            if self._entries and self._entries[0] == query:
                return False
            if query in self._entries:
                self._entries.remove(query)
            self._entries.insert(0, query)
            del self._entries[self.max_entries :]
            self._persist()
            logger.debug(f"Recorded query in history (total entries: {len(self._entries)})")
            return True

    def delete(self, query: str) -> bool:
        """
        Remove one matching entry.

        Returns:
            True if an entry was removed
        """
        query = (query or "").strip()
        with self._lock:
            if query not in self._entries:
                return False
            self._entries.remove(query)
            self._persist()
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            self._persist()
            logger.info("Cleared search history")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, query: object) -> bool:
        if not isinstance(query, str):
            return False
        with self._lock:
            return query.strip() in self._entries
