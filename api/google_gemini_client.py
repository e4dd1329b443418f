from typing import Any

from google import genai
from google.genai import types

from models.errors import OracleUnavailable
from utils.logger import get_logger

from .base_client import DEFAULT_MAX_LINKS, DEFAULT_TIMEOUT_S, BaseOracleClient

logger = get_logger(__name__)

ORACLE_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "isValid": types.Schema(type=types.Type.BOOLEAN),
        "reason": types.Schema(type=types.Type.STRING),
        "suggestedLinks": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "title": types.Schema(type=types.Type.STRING),
                    "url": types.Schema(type=types.Type.STRING),
                    "snippet": types.Schema(type=types.Type.STRING),
                    "thumbnailUrl": types.Schema(
                        type=types.Type.STRING,
                        description="A preview image URL for the content.",
                    ),
                },
                required=["title", "url", "snippet"],
            ),
        ),
    },
    required=["isValid", "reason", "suggestedLinks"],
)


class GeminiOracleClient(BaseOracleClient):
    """
    Relevance oracle backed by the Google Gemini API (google.genai package).
    The reply is constrained server-side with ``response_schema`` and
    re-validated locally.
    """

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.5-flash",
        max_links: int = DEFAULT_MAX_LINKS,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        client: Any = None,
        **kwargs,
    ):
        """
        Initialize the Gemini oracle client.

        Args:
            api_key: The Google Gemini API key
            model_name: The model to use (default: gemini-2.5-flash)
            max_links: Maximum number of suggested links accepted
            timeout_s: Request timeout in seconds
            client: Pre-built genai client (tests inject a fake here)
            **kwargs: Additional keyword arguments
                - temperature: Sampling temperature (default 0.2)
        """
        super().__init__(api_key, model_name, max_links=max_links, timeout_s=timeout_s, **kwargs)
        self.temperature = kwargs.get("temperature", 0.2)
        self.client = client or genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout_s * 1000)),
        )

    def _request_json(self, prompt: str) -> str | None:
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    response_mime_type="application/json",
                    response_schema=ORACLE_RESPONSE_SCHEMA,
                ),
            )
        except Exception as e:
            logger.error(
                f"Gemini oracle request failed: {e}",
                extra={
                    "extra_fields": {
                        "provider": self.provider_name,
                        "model": self.model_name,
                        "error_type": type(e).__name__,
                    }
                },
            )
            raise OracleUnavailable(details={"provider": self.provider_name}) from e

        return getattr(response, "text", None)
