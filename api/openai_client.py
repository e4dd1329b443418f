from typing import Any

import openai

from models.errors import OracleUnavailable
from utils.logger import get_logger

from .base_client import DEFAULT_MAX_LINKS, DEFAULT_TIMEOUT_S, BaseOracleClient

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a focus filter for academic work. You judge whether a search query "
    "belongs to the user's work and answer only with a JSON object."
)


class OpenAIOracleClient(BaseOracleClient):
    """
    Relevance oracle backed by the OpenAI chat completions API in JSON mode.
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o-mini",
        max_links: int = DEFAULT_MAX_LINKS,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        client: Any = None,
        **kwargs,
    ):
        """
        Initialize the OpenAI oracle client.

        Args:
            api_key: The OpenAI API key
            model_name: The model to use (default: gpt-4o-mini)
            max_links: Maximum number of suggested links accepted
            timeout_s: Request timeout in seconds
            client: Pre-built OpenAI client (tests inject a fake here)
            **kwargs: Additional keyword arguments
                - temperature: Sampling temperature (default 0.2)
                - max_tokens: Output token cap (default 4096)
        """
        super().__init__(api_key, model_name, max_links=max_links, timeout_s=timeout_s, **kwargs)
        self.temperature = kwargs.get("temperature", 0.2)
        self.max_tokens = kwargs.get("max_tokens", 4096)
        self.client = client or openai.OpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)

    def _request_json(self, prompt: str) -> str | None:
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            logger.error(
                f"OpenAI oracle request failed: {e}",
                extra={
                    "extra_fields": {
                        "provider": self.provider_name,
                        "model": self.model_name,
                        "error_type": type(e).__name__,
                    }
                },
            )
            raise OracleUnavailable(details={"provider": self.provider_name}) from e

        if not response.choices:
            return None
        return response.choices[0].message.content
