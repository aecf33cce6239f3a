"""
Health check routes for monitoring.
"""
from fastapi import APIRouter
from src.core.config import settings

router = APIRouter(prefix="/v1/api", tags=["Health"])


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": settings.api_title,
        "version": settings.api_version
    }
