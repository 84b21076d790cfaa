"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from psycopg_pool import ConnectionPool

from src.adapters.repository import (
    InMemoryAgentRepository,
    InMemoryAttemptLog,
    PostgresAgentRepository,
    PostgresAttemptLog,
    run_migrations,
)
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.api.v1.routes import API_VERSION
from src.config.settings import get_settings
from src.domain.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "AstraSync Agent Registry API v1 - Register, verify and list AI agents",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Records the start time reported as uptime
    - Creates the storage backend (PostgreSQL pool or in-memory) on startup
    - Runs migrations on startup
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting application...")
    app.state.started_at = time.monotonic()

    pool = None
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage; registrations are lost on restart")
        app.state.repository = InMemoryAgentRepository()
        app.state.attempt_log = InMemoryAttemptLog()
    else:
        logger.info("Connecting to database...")

        # Create connection pool with explicit sizing
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.pool = pool
        app.state.repository = PostgresAgentRepository(pool)
        app.state.attempt_log = PostgresAttemptLog(pool)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="astrasync",
    description="AstraSync Agent Registry API - Issues identifiers to AI agents "
    "and exposes verification lookups (Developer Preview)",
    version=API_VERSION,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/")
def service_info(request: Request) -> dict[str, Any]:
    """
    Service banner.

    Reports the agent count and database status; a store failure degrades
    the banner instead of failing the request.
    """
    try:
        total_agents: int | str = request.app.state.repository.count_agents()
        database_status = "connected"
    except PersistenceFailure:
        logger.exception("Service banner could not reach the store")
        total_agents = "unavailable"
        database_status = "error"

    return {
        "service": "AstraSync API",
        "version": API_VERSION,
        "status": "preview",
        "message": "Welcome to AstraSync Developer Preview. See /v1/docs for API documentation.",
        "stats": {
            "totalAgents": total_agents,
            "blockchainStatus": "pending_audit",
            "databaseStatus": database_status,
        },
    }


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with storage validation.

    Returns 200 OK if application and store are healthy.
    A store failure propagates as a 500 with a request id.
    """
    request.app.state.repository.count_agents()
    return {"status": "healthy"}
