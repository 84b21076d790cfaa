"""
Shared fixtures for adversarial tests.

Provides repositories for both storage backends so concurrency and
disclosure tests run against each of them.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryAgentRepository, InMemoryAttemptLog
from src.adapters.repository.postgres import PostgresAgentRepository, PostgresAttemptLog
from src.domain.registration import RegistrationService


@pytest.fixture(params=["memory", "postgres"])
def backend(request: pytest.FixtureRequest) -> Generator[RegistrationService, None, None]:
    """
    Registration service wired to each storage backend in turn.

    The postgres variant is skipped when no database is reachable.
    """
    if request.param == "memory":
        yield RegistrationService(InMemoryAgentRepository(), InMemoryAttemptLog())
        return

    pool: ConnectionPool = request.getfixturevalue("pool")
    request.getfixturevalue("clean_database")
    yield RegistrationService(PostgresAgentRepository(pool), PostgresAttemptLog(pool))
