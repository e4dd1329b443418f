from abc import ABC, abstractmethod

from api.oracle_schema import parse_oracle_response
from config.policy import focus_area_for
from models.errors import InvalidInput
from models.focus_types import OracleVerdict, UserRole
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_LINKS = 15
DEFAULT_TIMEOUT_S = 30.0


class BaseOracleClient(ABC):
    """
    Abstract base class for relevance oracle clients.

    Subclasses only implement the transport (``_request_json``); prompt
    construction and schema enforcement live here so every provider obeys the
    same contract. No retries happen at this layer.
    """

    provider_name = "base"

    def __init__(
        self,
        api_key: str,
        model_name: str,
        max_links: int = DEFAULT_MAX_LINKS,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        **kwargs,
    ):
        """
        Initialize the oracle client.

        Args:
            api_key: API key for the provider
            model_name: Model to query
            max_links: Maximum number of suggested links accepted in a reply
            timeout_s: Transport timeout in seconds
            **kwargs: Provider-specific parameters
        """
        if not api_key:
            raise ValueError(f"API key is required for {self.provider_name}")
        self.api_key = api_key
        self.model_name = model_name
        self.max_links = max_links
        self.timeout_s = timeout_s

    @abstractmethod
    def _request_json(self, prompt: str) -> str | None:
        """
        Send one structured-output request and return the raw JSON text.

        Raises:
            OracleUnavailable: On network failure, timeout or provider error
        """

    def build_prompt(self, query: str, role: UserRole) -> str:
        focus_area = focus_area_for(role)
        return (
            f'Is the search query "{query}" relevant for someone in the role of a '
            f"{role.value.lower()}?\n"
            f"Their priority focus is: {focus_area}.\n"
            f"If it is relevant, provide up to {self.max_links} helpful links. "
            "Normally, prioritize .edu, .gov, or .org domains.\n"
            'IMPORTANT: If the user is specifically searching for "videos", "lectures", '
            'or "YouTube" content, INCLUDE relevant youtube.com links that are educational '
            "or professional.\n"
            "For every result, include a high-quality thumbnail URL when one can be inferred "
            "(e.g. img.youtube.com/vi/ID/maxresdefault.jpg for videos).\n"
            "Respond with a single JSON object with the keys "
            '"isValid" (boolean), "reason" (string) and "suggestedLinks" '
            '(array of objects with "title", "url", "snippet" and optional "thumbnailUrl"). '
            'When the query is not relevant, set "isValid" to false, explain why in '
            '"reason" and return an empty "suggestedLinks" array.'
        )

    def validate_and_search(self, query: str, role: UserRole) -> OracleVerdict:
        """
        Ask the oracle whether ``query`` fits ``role`` and collect suggested links.

        Args:
            query: Non-empty search text
            role: Operating role (never UNSET)

        Returns:
            OracleVerdict parsed against the fixed response schema

        Raises:
            InvalidInput: Empty query or UNSET role
            OracleUnavailable: Transport failure
            MalformedOracleResponse: Schema violation
        """
        query = (query or "").strip()
        if not query:
            raise InvalidInput("Search query must not be empty.")
        if not role.is_operating:
            raise InvalidInput("A role must be selected before searching.")

        logger.info(
            "Oracle request",
            extra={
                "extra_fields": {
                    "provider": self.provider_name,
                    "model": self.model_name,
                    "role": role.value,
                    "query_chars": len(query),
                }
            },
        )
        raw_text = self._request_json(self.build_prompt(query, role))
        verdict = parse_oracle_response(raw_text, max_links=self.max_links)

        logger.info(
            "Oracle verdict",
            extra={
                "extra_fields": {
                    "provider": self.provider_name,
                    "is_valid": verdict.is_valid,
                    "link_count": len(verdict.suggested_links),
                }
            },
        )
        return verdict
