"""
PostgreSQL repository adapter - Implements AgentRepository and AttemptLog.

This module provides the PostgreSQL implementation of the domain's
repository ports using psycopg3 with raw SQL.

Atomic Registration:
-------------------
``create_agent`` inserts the agent row and its email_queue row inside one
``conn.transaction()`` block. Any error raised by either INSERT rolls back
both, so a record is never visible without its notification job and an
orphaned job never exists. Uniqueness of the public id is enforced by the
``agents`` primary key; a violation surfaces as IdentifierConflict.

Attempt Logging:
---------------
``PostgresAttemptLog.record`` is best effort. A failed insert is logged and
reported as False; it never propagates into the registration flow.
"""

import logging
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from src.domain.exceptions import IdentifierConflict, PersistenceFailure
from src.domain.models import (
    AgentData,
    AgentRecord,
    AgentStatus,
    AttemptSummary,
    BlockchainStatus,
    NotificationJob,
    RegistrationAttempt,
    RegistrationMetadata,
)

logger = logging.getLogger(__name__)

_AGENT_COLUMNS = """
    id, internal_id, email, status, blockchain_status, trust_score,
    registered_at, agent_data, metadata
"""


class PostgresAgentRepository:
    """
    Implements AgentRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create_agent(self, record: AgentRecord, notification: NotificationJob) -> None:
        """
        Insert an agent and queue its notification in one transaction.

        Raises:
            IdentifierConflict: If the public id already exists
            PersistenceFailure: On any other database error
        """
        insert_agent_sql = f"""
            INSERT INTO agents ({_AGENT_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        insert_job_sql = """
            INSERT INTO email_queue (recipient, subject, template, data, created_at)
            VALUES (%s, %s, %s, %s, %s)
        """

        try:
            with self._pool.connection() as conn, conn.transaction():
                conn.execute(
                    insert_agent_sql,
                    (
                        record.public_id,
                        record.internal_id,
                        record.email,
                        record.status.value,
                        record.blockchain_status.value,
                        record.trust_score,
                        record.registered_at,
                        Jsonb(record.agent.to_dict()),
                        Jsonb(record.metadata.to_dict()),
                    ),
                )
                conn.execute(
                    insert_job_sql,
                    (
                        notification.recipient,
                        notification.subject,
                        notification.template,
                        Jsonb(notification.data),
                        notification.created_at,
                    ),
                )
        except psycopg.errors.UniqueViolation as e:
            raise IdentifierConflict(record.public_id) from e
        except psycopg.Error as e:
            raise PersistenceFailure("Failed to register agent") from e

    def get_agent(self, public_id: str) -> AgentRecord | None:
        sql = f"SELECT {_AGENT_COLUMNS} FROM agents WHERE id = %s"
        row = self._fetchone(sql, (public_id,))
        return _row_to_record(row) if row is not None else None

    def list_recent(self, limit: int) -> list[AgentRecord]:
        # seq breaks registered_at ties in insertion order
        sql = f"""
            SELECT {_AGENT_COLUMNS}
            FROM agents
            ORDER BY registered_at DESC, seq DESC
            LIMIT %s
        """
        return [_row_to_record(row) for row in self._fetchall(sql, (limit,))]

    def count_agents(self) -> int:
        return self._fetchone("SELECT COUNT(*) FROM agents", ())[0]

    def count_agents_since(self, since: datetime) -> int:
        return self._fetchone("SELECT COUNT(*) FROM agents WHERE registered_at > %s", (since,))[0]

    def count_notifications(self) -> int:
        return self._fetchone("SELECT COUNT(*) FROM email_queue", ())[0]

    def list_notifications(self, public_id: str) -> list[NotificationJob]:
        sql = """
            SELECT recipient, subject, template, data, created_at
            FROM email_queue
            WHERE data->>'agentId' = %s
            ORDER BY id
        """
        return [
            NotificationJob(
                recipient=row[0],
                subject=row[1],
                template=row[2],
                data=row[3],
                created_at=row[4],
            )
            for row in self._fetchall(sql, (public_id,))
        ]

    def _fetchone(self, sql: str, params: tuple) -> tuple | None:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                return cursor.fetchone()
        except psycopg.Error as e:
            raise PersistenceFailure("Failed to read agents") from e

    def _fetchall(self, sql: str, params: tuple) -> list[tuple]:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                return cursor.fetchall()
        except psycopg.Error as e:
            raise PersistenceFailure("Failed to read agents") from e


class PostgresAttemptLog:
    """Implements AttemptLog protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def record(self, attempt: RegistrationAttempt) -> bool:
        sql = """
            INSERT INTO registration_attempts (event_type, email, agent_name, source, data, created_at)
            VALUES (%s, %s, %s, %s, %s, COALESCE(%s, NOW()))
        """
        try:
            with self._pool.connection() as conn:
                conn.execute(
                    sql,
                    (
                        attempt.event_type,
                        attempt.email,
                        attempt.agent_name,
                        attempt.source,
                        Jsonb(attempt.data),
                        attempt.created_at,
                    ),
                )
        except psycopg.Error:
            logger.exception("Failed to log %s", attempt.event_type)
            return False
        logger.debug("Logged %s for %s", attempt.event_type, attempt.email or "anonymous")
        return True

    def recent(self, limit: int) -> list[RegistrationAttempt]:
        sql = """
            SELECT event_type, email, agent_name, source, data, created_at
            FROM registration_attempts
            ORDER BY created_at DESC, id DESC
            LIMIT %s
        """
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (limit,))
                rows = cursor.fetchall()
        except psycopg.Error as e:
            raise PersistenceFailure("Failed to fetch recent attempts") from e

        return [
            RegistrationAttempt(
                event_type=row[0],
                email=row[1],
                agent_name=row[2],
                source=row[3],
                data=row[4],
                created_at=row[5],
            )
            for row in rows
        ]

    def summary(self) -> AttemptSummary:
        sql = """
            SELECT event_type, COUNT(*)
            FROM registration_attempts
            GROUP BY event_type
            ORDER BY COUNT(*) DESC
        """
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql)
                rows = cursor.fetchall()
        except psycopg.Error as e:
            raise PersistenceFailure("Failed to summarize attempts") from e

        by_event = {row[0]: row[1] for row in rows}
        return AttemptSummary(total=sum(by_event.values()), by_event=by_event)


def _row_to_record(row: tuple) -> AgentRecord:
    return AgentRecord(
        public_id=row[0],
        internal_id=str(row[1]),
        email=row[2],
        status=AgentStatus(row[3]),
        blockchain_status=BlockchainStatus(row[4]),
        trust_score=row[5],
        registered_at=row[6],
        agent=AgentData.from_dict(row[7]),
        metadata=RegistrationMetadata.from_dict(row[8]),
    )


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
