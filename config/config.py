import os
from dotenv import load_dotenv
from pathlib import Path
from enum import Enum

from utils.logger import get_logger

logger = get_logger(__name__)


class OracleProvider(Enum):
    """Supported relevance oracle providers."""
    GEMINI = "gemini"
    OPENAI = "openai"


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Oracle provider configuration
        self.ORACLE_PROVIDER = os.getenv('ORACLE_PROVIDER', OracleProvider.GEMINI.value).lower()
        self.GOOGLE_GEMINI_API_KEY = os.getenv('GOOGLE_GEMINI_API_KEY')
        self.OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
        self.DEFAULT_GEMINI_MODEL = os.getenv('DEFAULT_GEMINI_MODEL', 'gemini-2.5-flash')
        self.DEFAULT_OPENAI_MODEL = os.getenv('DEFAULT_OPENAI_MODEL', 'gpt-4o-mini')

        if self.ORACLE_PROVIDER == OracleProvider.OPENAI.value:
            self.ORACLE_MODEL = self.DEFAULT_OPENAI_MODEL
        else:
            self.ORACLE_MODEL = self.DEFAULT_GEMINI_MODEL

        # Search pipeline
        self.ORACLE_MAX_LINKS = int(os.getenv('ORACLE_MAX_LINKS', '15'))
        self.ORACLE_TIMEOUT_S = float(os.getenv('ORACLE_TIMEOUT_S', '30'))
        self.RESULTS_PAGE_SIZE = int(os.getenv('RESULTS_PAGE_SIZE', '6'))

        # Session clock
        self.SESSION_TICK_SECONDS = float(os.getenv('SESSION_TICK_SECONDS', '1.0'))

        # Idle workspaces are dropped after this many seconds
        self.WORKSPACE_IDLE_TTL_S = float(os.getenv('WORKSPACE_IDLE_TTL_S', '3600'))

        # Persistence
        default_db = Path(__file__).parent.parent / 'focusguard_history.db'
        self.HISTORY_DB_PATH = os.getenv('HISTORY_DB_PATH', str(default_db))

    def validate(self, log_errors: bool = True) -> bool:
        """
        Validate that all required configuration is present for the selected oracle provider.

        Args:
            log_errors: Log each problem found at ERROR level

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if self.ORACLE_PROVIDER == OracleProvider.GEMINI.value:
            if not self.GOOGLE_GEMINI_API_KEY:
                if log_errors:
                    logger.error("GOOGLE_GEMINI_API_KEY is not set. Please set it in the .env file.")
                return False
        elif self.ORACLE_PROVIDER == OracleProvider.OPENAI.value:
            if not self.OPENAI_API_KEY:
                if log_errors:
                    logger.error("OPENAI_API_KEY is not set. Please set it in the .env file.")
                return False
        else:
            if log_errors:
                logger.error(
                    f"Unknown ORACLE_PROVIDER '{self.ORACLE_PROVIDER}'. "
                    f"Must be one of: {', '.join([e.value for e in OracleProvider])}"
                )
            return False

        if self.ORACLE_MAX_LINKS <= 0:
            if log_errors:
                logger.error("ORACLE_MAX_LINKS must be a positive integer.")
            return False

        return True

    def get_oracle_info(self) -> str:
        """
        Get information about the currently selected relevance oracle.

        Returns:
            str: Formatted string with provider information
        """
        if self.ORACLE_PROVIDER == OracleProvider.GEMINI.value:
            return f"Google Gemini ({self.ORACLE_MODEL})"
        elif self.ORACLE_PROVIDER == OracleProvider.OPENAI.value:
            return f"OpenAI ({self.ORACLE_MODEL})"
        return "Unknown"
