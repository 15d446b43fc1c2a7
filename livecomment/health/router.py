"""Health check endpoints."""

from fastapi import APIRouter, Request

from livecomment.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    """Readiness probe - reports whether the database and cache are wired."""
    settings = get_settings()
    comment_service = getattr(request.app.state, "comment_service", None)
    return {
        "status": "ready" if comment_service else "degraded",
        "environment": settings.environment,
        "database": comment_service is not None,
        "cache": bool(comment_service and comment_service.cache.enabled),
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
