"""Health check endpoints"""
from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "rest-timer-notifications",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
