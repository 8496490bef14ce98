"""
FastAPI application entry point for the Visit Analytics API.

Configures logging and CORS, opens and closes the database pool in the
application lifespan, and mounts the analytics router under /analytics.

Run locally with:
    uvicorn visit_analytics.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from visit_analytics import __version__
from visit_analytics.api.analytics import router as analytics_router
from visit_analytics.core.config import get_settings
from visit_analytics.core.database import close_db, init_db

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the database pool on startup and close it on shutdown.

    A failed pool initialization is logged but does not stop startup; the
    pool is created lazily on the first query instead.
    """
    logger.info(f"{settings.api_title} starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info(f"{settings.api_title} shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


app = FastAPI(
    title=settings.api_title,
    version=__version__,
    description=(
        "Read-only analytics over field-visit reports: coverage, trends, "
        "top performers, category breakdowns and qualitative summaries."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(analytics_router, prefix="/analytics", tags=["analytics"])


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancer probes."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    return {
        "name": settings.api_title,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "visit_analytics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
