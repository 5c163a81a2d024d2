"""
Market Digest - FastAPI Application

Hosts the weekday report schedule and the on-demand trigger.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from market_digest.core.config import get_settings
from market_digest.api.v1 import router as api_v1_router
from market_digest.services.scheduler import (
    get_report_scheduler,
    start_report_scheduler,
    stop_report_scheduler,
)

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    if settings.enable_scheduler:
        scheduler = await start_report_scheduler()
        logger.info(
            f"Daily report scheduled at {settings.report_time} {settings.report_timezone}, "
            f"next run {scheduler.next_run().isoformat()}"
        )
    else:
        get_report_scheduler()
        logger.info("Report scheduler disabled (enable_scheduler=false)")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await stop_report_scheduler()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Daily US market summary delivered to Telegram.

    ## Pipeline
    - **Data Ingestion**: Quotes (Yahoo Finance, Finnhub fallback) and daily closes
    - **Indicator Engine**: RSI, moving averages, Bollinger bands (NumPy)
    - **Aggregation**: Movers ranking and upcoming earnings
    - **Report Generation**: LLM-written summary with bounded retries
    - **Delivery**: Segmented Telegram messages with plain-text fallback
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Market Digest API",
        "docs": "/docs",
        "next_run": "/api/v1/report/next-run",
    }
