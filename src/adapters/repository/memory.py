"""
In-memory repository adapter - Implements AgentRepository and AttemptLog.

Process-local storage for development and tests. A single lock guards
each store, so a record and its notification job are published together
and readers never observe one without the other.
"""

import threading
from dataclasses import replace
from datetime import datetime, timezone

from src.domain.exceptions import IdentifierConflict
from src.domain.models import AgentRecord, AttemptSummary, NotificationJob, RegistrationAttempt


class InMemoryAgentRepository:
    """
    Implements AgentRepository protocol with dicts and lists.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._agents: dict[str, AgentRecord] = {}
        self._order: list[str] = []
        self._notifications: list[NotificationJob] = []

    def create_agent(self, record: AgentRecord, notification: NotificationJob) -> None:
        with self._lock:
            if record.public_id in self._agents:
                raise IdentifierConflict(record.public_id)
            self._agents[record.public_id] = record
            self._order.append(record.public_id)
            self._notifications.append(notification)

    def get_agent(self, public_id: str) -> AgentRecord | None:
        with self._lock:
            return self._agents.get(public_id)

    def list_recent(self, limit: int) -> list[AgentRecord]:
        with self._lock:
            newest_first = [self._agents[public_id] for public_id in reversed(self._order)]
        # sort is stable, so equal timestamps keep newest-insert-first order
        newest_first.sort(key=lambda record: record.registered_at, reverse=True)
        return newest_first[:limit]

    def count_agents(self) -> int:
        with self._lock:
            return len(self._agents)

    def count_agents_since(self, since: datetime) -> int:
        with self._lock:
            return sum(1 for record in self._agents.values() if record.registered_at > since)

    def count_notifications(self) -> int:
        with self._lock:
            return len(self._notifications)

    def list_notifications(self, public_id: str) -> list[NotificationJob]:
        with self._lock:
            return [job for job in self._notifications if job.data.get("agentId") == public_id]


class InMemoryAttemptLog:
    """Implements AttemptLog protocol with a list."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._attempts: list[RegistrationAttempt] = []

    def record(self, attempt: RegistrationAttempt) -> bool:
        if attempt.created_at is None:
            attempt = replace(attempt, created_at=datetime.now(timezone.utc))
        with self._lock:
            self._attempts.append(attempt)
        return True

    def recent(self, limit: int) -> list[RegistrationAttempt]:
        with self._lock:
            return list(reversed(self._attempts))[:limit]

    def summary(self) -> AttemptSummary:
        with self._lock:
            by_event: dict[str, int] = {}
            for attempt in self._attempts:
                by_event[attempt.event_type] = by_event.get(attempt.event_type, 0) + 1
            return AttemptSummary(total=len(self._attempts), by_event=by_event)
