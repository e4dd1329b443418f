"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDTO(BaseModel):
    code: str
    message: str


class ProfileDTO(BaseModel):
    identity: str
    name: str
    role: str
    is_guest: bool = False

    @classmethod
    def from_user_context(cls, user):
        return cls(
            identity=user.identity,
            name=user.display_name,
            role=user.role.value,
            is_guest=user.is_guest,
        )


class ProfileLookupDTO(BaseModel):
    known: bool
    role: str | None = None


class SessionSnapshotDTO(BaseModel):
    status: str
    remaining_seconds: int
    total_seconds: int
    started_at: str | None = None
    pause_pending: bool = False
    progress: float = 0.0
    formatted_remaining: str

    @classmethod
    def from_snapshot(cls, snapshot):
        return cls(**snapshot.to_dict())


class TransitionResponseDTO(BaseModel):
    status: str
    snapshot: SessionSnapshotDTO
    reason: str | None = None

    @classmethod
    def from_transition(cls, result):
        return cls(
            status=result.status.value,
            snapshot=SessionSnapshotDTO.from_snapshot(result.snapshot),
            reason=result.reason,
        )


class SearchResultDTO(BaseModel):
    title: str
    url: str
    snippet: str
    thumbnail_url: str | None = None
    hostname: str = ""
    is_trusted: bool
    is_blocked: bool
    block_reason: str = ""

    @classmethod
    def from_search_result(cls, result):
        return cls(
            title=result.title,
            url=result.url,
            snippet=result.snippet,
            thumbnail_url=result.thumbnail_url,
            hostname=result.hostname,
            is_trusted=result.is_trusted,
            is_blocked=result.is_blocked,
            block_reason=result.block_reason,
        )


class SearchResponseDTO(BaseModel):
    query: str
    status: str
    reason: str = ""
    results: list[SearchResultDTO] = Field(default_factory=list)
    total_results: int = 0
    blocked_count: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_outcome(cls, outcome):
        return cls(
            query=outcome.query,
            status=outcome.status,
            reason=outcome.reason,
            results=[SearchResultDTO.from_search_result(r) for r in outcome.results],
            total_results=len(outcome.results),
            blocked_count=outcome.blocked_count,
            metadata=outcome.metadata,
        )


class ResultsPageDTO(BaseModel):
    query: str
    offset: int
    limit: int
    total_results: int
    has_more: bool
    results: list[SearchResultDTO] = Field(default_factory=list)


class HistoryResponseDTO(BaseModel):
    entries: list[str] = Field(default_factory=list)
    recent: list[str] = Field(default_factory=list)
    total: int = 0


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
    oracle: str = ""
    oracle_configured: bool = False
