"""Factory for creating the relevance oracle client from environment configuration."""

from config.config import Config, OracleProvider
from models.errors import OracleUnavailable
from utils.logger import get_logger

from .base_client import DEFAULT_MAX_LINKS, BaseOracleClient

logger = get_logger(__name__)


def create_oracle_client_from_env(config: Config | None = None) -> BaseOracleClient:
    """
    Create the relevance oracle client selected by ORACLE_PROVIDER.

    Environment variables:
        ORACLE_PROVIDER: "gemini" (default) or "openai"
        GOOGLE_GEMINI_API_KEY / OPENAI_API_KEY: provider key (required)
        DEFAULT_GEMINI_MODEL / DEFAULT_OPENAI_MODEL: model override
        ORACLE_MAX_LINKS: link cap (default: 15)
        ORACLE_TIMEOUT_S: request timeout (default: 30)

    Raises:
        ValueError: If the provider is unknown or its API key is not set
    """
    config = config or Config()
    provider = config.ORACLE_PROVIDER

    if provider == OracleProvider.GEMINI.value:
        from api.google_gemini_client import GeminiOracleClient

        if not config.GOOGLE_GEMINI_API_KEY:
            raise ValueError("GOOGLE_GEMINI_API_KEY not found in environment variables")
        client = GeminiOracleClient(
            api_key=config.GOOGLE_GEMINI_API_KEY,
            model_name=config.DEFAULT_GEMINI_MODEL,
            max_links=config.ORACLE_MAX_LINKS,
            timeout_s=config.ORACLE_TIMEOUT_S,
        )

    elif provider == OracleProvider.OPENAI.value:
        from api.openai_client import OpenAIOracleClient

        if not config.OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY not found in environment variables")
        client = OpenAIOracleClient(
            api_key=config.OPENAI_API_KEY,
            model_name=config.DEFAULT_OPENAI_MODEL,
            max_links=config.ORACLE_MAX_LINKS,
            timeout_s=config.ORACLE_TIMEOUT_S,
        )

    else:
        raise ValueError(
            f"Unsupported ORACLE_PROVIDER: {provider}. "
            f"Must be one of: {', '.join(p.value for p in OracleProvider)}"
        )

    logger.info(f"Relevance oracle initialized: {config.get_oracle_info()}")
    return client


class UnconfiguredOracleClient(BaseOracleClient):
    """
    Stand-in used when no provider can be built from the environment.

    Session commands and history work as usual; every search that passes local
    validation fails with OracleUnavailable.
    """

    provider_name = "unconfigured"

    def __init__(self, reason: str, max_links: int = DEFAULT_MAX_LINKS):
        super().__init__(api_key="unconfigured", model_name="none", max_links=max_links)
        self.reason = reason

    def _request_json(self, prompt: str) -> str | None:
        logger.warning(
            "Search attempted without a configured relevance oracle",
            extra={"extra_fields": {"reason": self.reason}},
        )
        raise OracleUnavailable(details={"provider": self.provider_name})
