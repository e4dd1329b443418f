"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models.errors import FocusGuardError
from server.dependencies import get_config, get_workspace_registry
from server.middleware import RequestIDMiddleware
from server.routes import health, history, profiles, search, session
from server.schemas.responses import ErrorDTO
from server.utils import status_code_for
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    if not get_config().validate():
        logger.warning("Relevance oracle configuration incomplete; searches will fail")

    required_keys = ["API_KEYS"]
    missing = [k for k in required_keys if not os.getenv(k)]
    if missing:
        logger.warning(f"Missing environment variables: {missing}")

    yield

    get_workspace_registry().clear_all()
    logger.info("FastAPI server shutting down")


async def focus_error_handler(request: Request, exc: FocusGuardError) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.info(
        f"Request failed with {exc.code}",
        extra={
            "extra_fields": {
                "request_id": getattr(request.state, "request_id", "unknown"),
                "status_code": status_code,
                "path": request.url.path,
            }
        },
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": ErrorDTO(code=exc.code, message=exc.message).model_dump()},
    )


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="FocusGuard API",
        description="Focus sessions with role-aware, AI-gated search",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FocusGuardError, focus_error_handler)

    app.include_router(health.router)
    app.include_router(profiles.router)
    app.include_router(session.router)
    app.include_router(search.router)
    app.include_router(history.router)

    return app
