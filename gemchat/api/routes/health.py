"""
Health Check Routes
"""

from datetime import UTC, datetime

from fastapi import APIRouter, status

from gemchat import __version__
from gemchat.models.api import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """Liveness check; reports the configured model when a provider is up."""
    from gemchat.api.main import app_state

    provider = app_state.get("provider")
    model = provider.get_model_info().name if provider is not None else None
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
        model=model,
    )
