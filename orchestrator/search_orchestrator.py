"""
SearchOrchestrator - per-query lifecycle for gated search.

Key guarantees:
- Empty queries and UNSET roles are rejected before the oracle is called
- Exactly one history mutation per validated query, none per rejection or fault
- Result sets are replaced, never merged; faults leave the previous set intact
- Last query wins: a response for a superseded search is dropped
- No retries; resubmission is up to the user
"""

import asyncio
import time

from api.base_client import BaseOracleClient
from context.history_ledger import HistoryLedger
from models.errors import FocusGuardError, InvalidInput, OracleUnavailable
from models.focus_types import OracleVerdict, SearchOutcome, SearchResult, UserRole
from orchestrator.content_filter import classify_links
from orchestrator.events import SearchEvent, SearchEventBus
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 6


class SearchOrchestrator:
    def __init__(
        self,
        oracle: BaseOracleClient,
        ledger: HistoryLedger,
        events: SearchEventBus | None = None,
        timeout_s: float | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._oracle = oracle
        self.ledger = ledger
        self.events = events or SearchEventBus()
        self._timeout_s = timeout_s
        self.page_size = page_size

        self._generation = 0
        self._results: tuple[SearchResult, ...] = ()
        self._last_query = ""

    # ---------- results ----------

    @property
    def results(self) -> tuple[SearchResult, ...]:
        return self._results

    @property
    def last_query(self) -> str:
        return self._last_query

    def page(self, offset: int = 0, limit: int | None = None) -> list[SearchResult]:
        """Slice the current result set for "load more" without re-querying."""
        offset = max(0, offset)
        limit = self.page_size if limit is None else max(0, limit)
        return list(self._results[offset : offset + limit])

    # ---------- history ----------

    def history(self) -> list[str]:
        return self.ledger.entries()

    def recent_history(self, count: int = 4) -> list[str]:
        return self.ledger.recent(count)

    def filter_history(self, text: str) -> list[str]:
        return self.ledger.filter(text)

    def delete_history_item(self, query: str) -> bool:
        return self.ledger.delete(query)

    def clear_history(self) -> None:
        self.ledger.clear()

    # ---------- search ----------

    async def search(self, query: str, role: UserRole) -> SearchOutcome:
        """
        Validate ``query`` with the relevance oracle and classify its links.

        Args:
            query: Raw search text
            role: Operating role of the caller

        Returns:
            SearchOutcome with status "results", "rejected" or "stale"

        Raises:
            InvalidInput: Query trims to empty or role is UNSET
            OracleUnavailable: Oracle unreachable or timed out
            MalformedOracleResponse: Oracle reply violates the schema
        """
        query = (query or "").strip()
        if not query:
            raise InvalidInput("Search query must not be empty.")
        if not role.is_operating:
            raise InvalidInput("A role must be selected before searching.")

        self._generation += 1
        generation = self._generation
        self.events.emit(SearchEvent(kind="started", query=query, generation=generation))
        start_time = time.perf_counter()

        try:
            verdict = await self._call_oracle(query, role)
        except FocusGuardError as e:
            if self._is_stale(generation):
                return self._stale(query, generation)
            logger.error(
                f"Search failed: {e.code}",
                extra={
                    "extra_fields": {
                        "generation": generation,
                        "role": role.value,
                        "error_code": e.code,
                    }
                },
            )
            self.events.emit(
                SearchEvent(
                    kind="failed",
                    query=query,
                    generation=generation,
                    reason=e.message,
                    error_code=e.code,
                )
            )
            raise

        if self._is_stale(generation):
            return self._stale(query, generation)

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        self._last_query = query

        if not verdict.is_valid:
            self._results = ()
            logger.info(
                "Query rejected by oracle",
                extra={"extra_fields": {"generation": generation, "role": role.value}},
            )
            self.events.emit(
                SearchEvent(
                    kind="rejected", query=query, generation=generation, reason=verdict.reason
                )
            )
            return SearchOutcome(
                query=query,
                status="rejected",
                reason=verdict.reason,
                generation=generation,
                metadata={"latency_ms": latency_ms},
            )

        self.ledger.record(query)
        results = tuple(classify_links(verdict.suggested_links, query, role))
        self._results = results

        outcome = SearchOutcome(
            query=query,
            status="results",
            results=results,
            reason=verdict.reason,
            generation=generation,
            metadata={"latency_ms": latency_ms},
        )
        logger.info(
            "Search classified",
            extra={
                "extra_fields": {
                    "generation": generation,
                    "role": role.value,
                    "result_count": len(results),
                    "blocked_count": outcome.blocked_count,
                    "latency_ms": latency_ms,
                }
            },
        )
        self.events.emit(
            SearchEvent(
                kind="classified",
                query=query,
                generation=generation,
                result_count=len(results),
                blocked_count=outcome.blocked_count,
            )
        )
        return outcome

    # ---------- helpers ----------

    async def _call_oracle(self, query: str, role: UserRole) -> OracleVerdict:
        """Run the synchronous oracle client in a worker thread, with an optional timeout."""
        call = asyncio.to_thread(self._oracle.validate_and_search, query, role)
        try:
            if self._timeout_s:
                return await asyncio.wait_for(call, timeout=self._timeout_s)
            return await call
        except asyncio.TimeoutError as e:
            logger.warning(
                "Oracle call timed out",
                extra={"extra_fields": {"timeout_s": self._timeout_s}},
            )
            raise OracleUnavailable(details={"timeout_s": self._timeout_s}) from e

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _stale(self, query: str, generation: int) -> SearchOutcome:
        logger.info(
            "Dropped stale oracle response",
            extra={"extra_fields": {"generation": generation, "current": self._generation}},
        )
        return SearchOutcome(query=query, status="stale", generation=generation)
