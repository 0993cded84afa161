"""
API package initialization.

This package contains the FastAPI router modules for the change impact service:
- predictions: prediction, prediction store and taxonomy endpoints
"""

from fastapi import APIRouter

from change_impact.api.predictions import router as predictions_router

# Create main API router
api_router = APIRouter()

# The predictions router declares full paths (/predict, /predictions/...)
api_router.include_router(predictions_router, tags=["predictions"])

__all__ = [
    "api_router",
    "predictions_router",
]
