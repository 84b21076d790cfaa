"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory repository and attempt log
- Domain services wired to them
- Test client for the application backed by in-memory storage
- PostgreSQL connection pool (skipped when no database is reachable)
"""

import time
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.memory import InMemoryAgentRepository, InMemoryAttemptLog
from src.adapters.repository.postgres import run_migrations
from src.api.main import app as registry_app
from src.config.settings import get_settings
from src.domain.models import AgentInput, RequestContext
from src.domain.queries import AgentQueryService
from src.domain.registration import RegistrationService


@pytest.fixture
def repository() -> InMemoryAgentRepository:
    """Fresh in-memory agent repository."""
    return InMemoryAgentRepository()


@pytest.fixture
def attempt_log() -> InMemoryAttemptLog:
    """Fresh in-memory attempt log."""
    return InMemoryAttemptLog()


@pytest.fixture
def registration_service(
    repository: InMemoryAgentRepository, attempt_log: InMemoryAttemptLog
) -> RegistrationService:
    return RegistrationService(repository=repository, attempt_log=attempt_log)


@pytest.fixture
def query_service(
    repository: InMemoryAgentRepository, attempt_log: InMemoryAttemptLog
) -> AgentQueryService:
    return AgentQueryService(repository=repository, attempt_log=attempt_log)


@pytest.fixture
def agent_input() -> AgentInput:
    return AgentInput(name="Bot", owner="Acme")


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(source="test-suite", ip="127.0.0.1", user_agent="pytest")


@pytest.fixture
def client(
    repository: InMemoryAgentRepository, attempt_log: InMemoryAttemptLog
) -> Generator[TestClient, None, None]:
    """
    Test client for the full application with in-memory storage.

    The lifespan is not run; storage is injected into app.state directly.
    """
    registry_app.state.repository = repository
    registry_app.state.attempt_log = attempt_log
    registry_app.state.started_at = time.monotonic()
    yield TestClient(registry_app)
    registry_app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool for tests against a real PostgreSQL database.

    Migrations are applied once per session. Tests using this fixture are
    skipped when the configured database cannot be reached.
    """
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=2)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")

    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty all registry tables before a test."""
    with pool.connection() as conn:
        conn.execute("TRUNCATE agents, email_queue, registration_attempts RESTART IDENTITY")
    yield
