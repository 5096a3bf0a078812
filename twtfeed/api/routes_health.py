"""Health check endpoints for the twtxt feed reader API."""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def health_check():
    """Liveness probe."""
    return {"ok": True}


@router.get("/readyz")
async def readiness_check():
    """Readiness probe."""
    return {"ok": True}
