from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal
from urllib.parse import urlparse


class UserRole(str, Enum):
    UNSET = "UNSET"
    RESEARCHER = "RESEARCHER"
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"

    @property
    def is_operating(self) -> bool:
        return self is not UserRole.UNSET

    @classmethod
    def parse(cls, value: "str | UserRole | None") -> "UserRole":
        """Lenient lookup by value or name; anything unknown maps to UNSET."""
        if isinstance(value, UserRole):
            return value
        if not value:
            return cls.UNSET
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNSET


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    LOCKED = "LOCKED"
    PAUSED = "PAUSED"
    ENDED = "ENDED"


class TransitionStatus(str, Enum):
    APPLIED = "applied"
    NOT_APPLICABLE = "not_applicable"
    INVALID_INPUT = "invalid_input"


class SessionAction(str, Enum):
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    END = "end"
    RESET = "reset"
    SEARCH = "search"


def format_seconds(total_seconds: int) -> str:
    """Render seconds as HH:MM:SS, or MM:SS when there are no whole hours."""
    hrs = total_seconds // 3600
    mins = (total_seconds % 3600) // 60
    secs = total_seconds % 60
    if hrs > 0:
        return f"{hrs:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


@dataclass(frozen=True)
class SessionSnapshot:
    status: SessionStatus = SessionStatus.IDLE
    remaining_seconds: int = 0
    total_seconds: int = 0
    started_at: datetime | None = None
    pause_pending: bool = False

    @property
    def progress(self) -> float:
        """Fraction of the session still remaining (1.0 right after start)."""
        if self.total_seconds <= 0:
            return 0.0
        return self.remaining_seconds / self.total_seconds

    @property
    def formatted_remaining(self) -> str:
        return format_seconds(self.remaining_seconds)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "remaining_seconds": self.remaining_seconds,
            "total_seconds": self.total_seconds,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "pause_pending": self.pause_pending,
            "progress": self.progress,
            "formatted_remaining": self.formatted_remaining,
        }


@dataclass(frozen=True)
class TransitionResult:
    status: TransitionStatus
    snapshot: SessionSnapshot
    reason: str | None = None

    @property
    def applied(self) -> bool:
        return self.status is TransitionStatus.APPLIED


@dataclass(frozen=True)
class OracleLink:
    """One validated link suggestion, exactly as the oracle supplied it."""

    title: str
    url: str
    snippet: str
    thumbnail_url: str | None = None


@dataclass(frozen=True)
class OracleVerdict:
    is_valid: bool
    reason: str
    suggested_links: tuple[OracleLink, ...] = ()


@dataclass(frozen=True)
class LinkClassification:
    is_trusted: bool
    is_blocked: bool
    block_reason: str = ""


@dataclass(frozen=True)
class SearchResult:
    title: str
    url: str
    snippet: str
    thumbnail_url: str | None = None
    is_trusted: bool = False
    is_blocked: bool = False
    block_reason: str = ""

    @property
    def hostname(self) -> str:
        return urlparse(self.url).hostname or ""

    @classmethod
    def from_link(cls, link: OracleLink, classification: LinkClassification) -> "SearchResult":
        return cls(
            title=link.title,
            url=link.url,
            snippet=link.snippet,
            thumbnail_url=link.thumbnail_url,
            is_trusted=classification.is_trusted,
            is_blocked=classification.is_blocked,
            block_reason=classification.block_reason,
        )


SearchStatus = Literal["results", "rejected", "stale"]


@dataclass(frozen=True)
class SearchOutcome:
    """
    Result of one search invocation.

    status:
        results  - oracle accepted the query; ``results`` holds the classified set
        rejected - oracle judged the query off-focus/unsafe; ``reason`` explains why
        stale    - a newer search was issued while this one was in flight
    """

    query: str
    status: SearchStatus
    results: tuple[SearchResult, ...] = ()
    reason: str = ""
    generation: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return self.status == "results"

    @property
    def blocked_count(self) -> int:
        return sum(1 for r in self.results if r.is_blocked)
