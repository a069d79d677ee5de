"""
MarketDash Analytics - FastAPI Application

Main entry point for the analytics API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketdash.core.config import settings
from marketdash.api.v1 import router as api_v1_router
from marketdash.db.database import init_db, close_db
from marketdash.services.cache import init_redis, close_redis
from marketdash.services.data_sources import close_sources

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    # Initialize SQLite database
    await init_db()

    # Initialize Redis cache
    if settings.use_redis_cache:
        redis_client = await init_redis()
        if redis_client:
            logger.info("Redis cache connected")
        else:
            logger.info("Redis unavailable - using in-memory cache")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_sources()
    await close_redis()
    await close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    MarketDash Analytics API

    ## Services
    - **Indicators**: SMA, RSI, ATR, relative volume (pure Python/NumPy)
    - **Correlation**: Macro beta (CPI, jobless claims) and asset correlation matrices
    - **Valuation**: CAPE (Shiller P/E) for the S&P 500 or a single security
    - **Options Sentiment**: Call/put open interest ratio around spot, with history
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "MarketDash Analytics API",
        "docs": "/docs",
        "health": "/health",
    }
