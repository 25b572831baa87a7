"""API Routes Package

Aggregates route handlers into a single router for the main FastAPI app.
"""

from fastapi import APIRouter

from .voice import router as voice_router


# Create main API router
api_router = APIRouter(prefix="/api")

api_router.include_router(voice_router, prefix="/voice", tags=["voice"])

__all__ = ["api_router"]
