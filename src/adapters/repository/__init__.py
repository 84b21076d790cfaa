"""Repository adapters - Database implementations."""

from .memory import InMemoryAgentRepository, InMemoryAttemptLog
from .postgres import PostgresAgentRepository, PostgresAttemptLog, run_migrations

__all__ = [
    "InMemoryAgentRepository",
    "InMemoryAttemptLog",
    "PostgresAgentRepository",
    "PostgresAttemptLog",
    "run_migrations",
]
