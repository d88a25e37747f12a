"""Health check endpoint: no runtime dependencies, answers even before sync starts."""

from fastapi import APIRouter

from fieldlogger.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Process liveness plus the remote service this host syncs to."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.app_title,
        "version": settings.app_version,
        "environment": settings.app_env,
        "remote": settings.remote_api_url,
    }
