"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from datetime import datetime
from typing import Protocol

from .models import AgentRecord, AttemptSummary, NotificationJob, RegistrationAttempt


class AgentRepository(Protocol):
    """Port interface for agent record and notification outbox persistence."""

    def create_agent(self, record: AgentRecord, notification: NotificationJob) -> None:
        """
        Atomically persist an agent record and its notification job.

        Both rows become visible together or not at all. Implementations
        must roll back the record if queueing the notification fails.

        Args:
            record: Fully built agent record
            notification: Job referencing ``record.public_id``

        Raises:
            IdentifierConflict: If ``record.public_id`` already exists
            PersistenceFailure: On any other store failure
        """
        ...

    def get_agent(self, public_id: str) -> AgentRecord | None:
        """
        Fetch a record by public id.

        Returns:
            The record, or None if no such id exists
        """
        ...

    def list_recent(self, limit: int) -> list[AgentRecord]:
        """Return up to ``limit`` records, most recently registered first."""
        ...

    def count_agents(self) -> int:
        """Return the total number of records."""
        ...

    def count_agents_since(self, since: datetime) -> int:
        """Return the number of records registered after ``since``."""
        ...

    def count_notifications(self) -> int:
        """Return the number of queued notification jobs."""
        ...

    def list_notifications(self, public_id: str) -> list[NotificationJob]:
        """Return the notification jobs that reference ``public_id``."""
        ...


class AttemptLog(Protocol):
    """
    Port interface for the registration attempt log.

    Logging is best effort: ``record`` reports failure by returning False
    and never raises into the caller's flow.
    """

    def record(self, attempt: RegistrationAttempt) -> bool:
        """Append an attempt. Returns True if it was stored."""
        ...

    def recent(self, limit: int) -> list[RegistrationAttempt]:
        """Return up to ``limit`` attempts, newest first."""
        ...

    def summary(self) -> AttemptSummary:
        """Return total and per-event counts."""
        ...

