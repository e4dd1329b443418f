"""FastAPI dependencies for authentication, identity resolution and workspace access."""

import os

from fastapi import Depends, Header, HTTPException, Request, status

from config.config import Config
from context.focus_session import FocusSession
from context.history_ledger import HistoryLedger, InMemoryHistoryStore
from context.profile_directory import ProfileDirectory
from context.session_clock import SessionClock
from context.workspace import FocusWorkspace, WorkspaceRegistry
from models.user_context import UserContext
from orchestrator.search_orchestrator import SearchOrchestrator
from server.database import SqliteHistoryStore
from server.utils import redact_sensitive_headers
from utils.logger import get_logger

logger = get_logger(__name__)


async def get_api_key(request: Request, x_api_key: str | None = Header(None)):
    """Validate API key from X-API-Key header."""
    valid_keys_str = os.getenv("API_KEYS", "")
    request_id = getattr(request.state, "request_id", "unknown")
    redacted_headers = redact_sensitive_headers(dict(request.headers))

    if not valid_keys_str:
        logger.error(
            "API authentication not configured",
            extra={"extra_fields": {"request_id": request_id, "headers": redacted_headers}},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API authentication not configured",
        )

    valid_keys = [k.strip() for k in valid_keys_str.split(",") if k.strip()]

    if not x_api_key or x_api_key not in valid_keys:
        logger.warning(
            "API authentication failed",
            extra={"extra_fields": {"request_id": request_id, "headers": redacted_headers}},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing API key"
        )

    return x_api_key


def get_config() -> Config:
    """Dependency to get the process configuration (singleton pattern)."""
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def get_profile_directory() -> ProfileDirectory:
    """Dependency to get the profile directory (singleton pattern)."""
    if not hasattr(get_profile_directory, "_instance"):
        get_profile_directory._instance = ProfileDirectory()
    return get_profile_directory._instance


def build_workspace(user: UserContext) -> FocusWorkspace:
    """Assemble a workspace for one user from environment configuration."""
    from api.factory import UnconfiguredOracleClient, create_oracle_client_from_env

    config = get_config()
    try:
        oracle = create_oracle_client_from_env(config)
    except ValueError as e:
        logger.warning(
            f"Relevance oracle not configured, searches will fail: {e}",
            extra={"extra_fields": {"identity": user.identity}},
        )
        oracle = UnconfiguredOracleClient(str(e), max_links=config.ORACLE_MAX_LINKS)

    if user.is_guest:
        store = InMemoryHistoryStore()
    else:
        store = SqliteHistoryStore(user.identity, config.HISTORY_DB_PATH)

    session = FocusSession(user.identity, verifier=get_profile_directory())
    return FocusWorkspace(
        user=user,
        session=session,
        orchestrator=SearchOrchestrator(
            oracle=oracle,
            ledger=HistoryLedger(store),
            timeout_s=config.ORACLE_TIMEOUT_S,
            page_size=config.RESULTS_PAGE_SIZE,
        ),
        clock=SessionClock(session, interval_s=config.SESSION_TICK_SECONDS),
    )


def get_workspace_registry() -> WorkspaceRegistry:
    """Dependency to get the workspace registry (singleton pattern)."""
    if not hasattr(get_workspace_registry, "_instance"):
        get_workspace_registry._instance = WorkspaceRegistry(factory=build_workspace)
    return get_workspace_registry._instance


async def get_current_user(
    x_user_id: str | None = Header(None),
    directory: ProfileDirectory = Depends(get_profile_directory),
) -> UserContext:
    """Resolve the caller from the X-User-Id header."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id")

    user = directory.resolve(x_user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown user")
    return user


async def get_workspace(
    user: UserContext = Depends(get_current_user),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    directory: ProfileDirectory = Depends(get_profile_directory),
    config: Config = Depends(get_config),
) -> FocusWorkspace:
    evicted = registry.evict_idle(config.WORKSPACE_IDLE_TTL_S, keep=user.identity)
    for workspace in evicted:
        if workspace.user.is_guest:
            directory.forget_guest(workspace.user.identity)
    return registry.get_or_create(user)
