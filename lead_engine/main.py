"""
FastAPI application for the lead discovery and scoring engine.

Discovery and scoring are exposed as on-demand batch endpoints; scheduling
lives outside the engine (see workers/engine_cli.py).
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lead_engine.core.config import settings
from lead_engine.errors import AppError, app_error_handler
from lead_engine.routers import discovery, health, lead_queue

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s", settings.APP_NAME)
    yield
    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="Lead discovery and daily lead-queue scoring API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)

app.include_router(health.router, tags=["health"])
app.include_router(discovery.router)
app.include_router(lead_queue.router)
