"""
FastAPI application entry point for the Change Impact API.

This module configures logging and CORS, registers the API router, and
manages the prediction store connection pool lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from change_impact import __version__
from change_impact.api import api_router
from change_impact.core.config import get_settings
from change_impact.core.database import DatabaseNotConfiguredError, init_db, close_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Initialize the prediction store connection pool (if configured)

    On shutdown:
        - Close the prediction store connection pool
    """
    # Startup
    logger.info("Change Impact API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except DatabaseNotConfiguredError:
        logger.warning("DATABASE_URL not set; prediction store endpoints are unavailable")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        # /predict does not need the store

    yield

    # Shutdown
    logger.info("Change Impact API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Change Impact API",
    version=__version__,
    description=(
        "Predicts the schedule impact of proposed changes to ERP training "
        "materials and stores predictions for later analysis."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'ok' and the current UTC timestamp
    """
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Change Impact API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "change_impact.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
