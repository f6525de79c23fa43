"""Health check endpoints for fatbox."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from fatbox.api.dependencies import get_settings
from fatbox.core.config import Settings

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Liveness probe answering with a fixed plaintext body."""
    return "fatbox is working."


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)) -> dict:
    """Health check endpoint.

    Returns:
        dict: Health status response with status, service, and version fields
    """
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
    }
