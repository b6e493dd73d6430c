"""
Health check endpoint.
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from newspulse import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Liveness check; does not touch the backend."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }
