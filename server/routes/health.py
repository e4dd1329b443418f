"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from config.config import Config
from server.dependencies import get_config
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(config: Config = Depends(get_config)):
    """Liveness plus a hint about which relevance oracle is configured."""
    return HealthResponseDTO(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        oracle=config.get_oracle_info(),
        oracle_configured=config.validate(log_errors=False),
    )
