"""Response schema for the relevance oracle and the parser that enforces it."""

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.errors import MalformedOracleResponse
from models.focus_types import OracleLink, OracleVerdict
from utils.logger import get_logger

logger = get_logger(__name__)


def is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


class OracleLinkModel(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    title: str
    url: str
    snippet: str
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl")

    @field_validator("title", "snippet")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        if not is_absolute_url(value.strip()):
            raise ValueError(f"not an absolute http(s) URL: {value!r}")
        return value

    @field_validator("thumbnail_url")
    @classmethod
    def _blank_thumbnail_is_absent(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value


class OracleResponseModel(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    is_valid: bool = Field(..., alias="isValid")
    reason: str
    suggested_links: list[OracleLinkModel] = Field(..., alias="suggestedLinks")


def parse_oracle_response(raw_text: str | None, max_links: int) -> OracleVerdict:
    """
    Validate a raw JSON reply from the oracle.

    Args:
        raw_text: The model's text output (expected to be a JSON object)
        max_links: Upper bound on suggestedLinks

    Returns:
        OracleVerdict with validated links in oracle order

    Raises:
        MalformedOracleResponse: The reply is missing, not JSON, or violates the schema
    """
    if raw_text is None or not raw_text.strip():
        raise MalformedOracleResponse(details={"error": "empty response"})

    try:
        parsed = OracleResponseModel.model_validate_json(raw_text)
    except ValidationError as e:
        logger.warning(
            "Oracle response failed schema validation",
            extra={"extra_fields": {"error_count": e.error_count()}},
        )
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise MalformedOracleResponse(details={"errors": errors[:5]}) from e

    if len(parsed.suggested_links) > max_links:
        raise MalformedOracleResponse(
            details={
                "error": "too many links",
                "received": len(parsed.suggested_links),
                "max_links": max_links,
            }
        )

    links = tuple(
        OracleLink(
            title=link.title,
            url=link.url,
            snippet=link.snippet,
            thumbnail_url=link.thumbnail_url,
        )
        for link in parsed.suggested_links
    )
    return OracleVerdict(is_valid=parsed.is_valid, reason=parsed.reason, suggested_links=links)
