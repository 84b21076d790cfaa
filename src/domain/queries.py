"""
Query domain service - Read-only lookups over the agent registry.

All operations are side-effect free against the agent store. Missing
records raise AgentNotFound so callers can tell "never existed" apart
from a store failure (PersistenceFailure).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from .exceptions import AgentNotFound, EmailMismatch, EmailRequired
from .models import (
    AgentRecord,
    AttemptEvent,
    RecentAgents,
    RegistrationAttempt,
    RegistryStats,
)
from .ports import AgentRepository, AttemptLog

DEFAULT_RECENT_LIMIT = 10
MAX_RECENT_LIMIT = 100
DEFAULT_ATTEMPTS_LIMIT = 20


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    """Default absent or non-positive limits, then cap at ``maximum``."""
    if limit is None or limit <= 0:
        limit = default
    return min(limit, maximum)


@dataclass
class AgentQueryService:
    """Domain service for verify, detail, listing and statistics queries."""

    repository: AgentRepository
    attempt_log: AttemptLog
    default_limit: int = DEFAULT_RECENT_LIMIT
    max_limit: int = MAX_RECENT_LIMIT
    default_attempts_limit: int = DEFAULT_ATTEMPTS_LIMIT
    stats_window_hours: int = 24

    def verify(self, public_id: str, source: str = "direct-api") -> AgentRecord:
        """
        Look up an agent for public verification.

        The caller must only project public fields from the returned record.

        Raises:
            AgentNotFound: If no agent has this id
        """
        self.attempt_log.record(
            RegistrationAttempt(
                event_type=AttemptEvent.VERIFICATION_ATTEMPT.value,
                source=source,
                data={"agentId": public_id},
            )
        )
        return self._get(public_id)

    def get_details(self, public_id: str, email: str | None) -> AgentRecord:
        """
        Fetch the full record for its owner.

        Existence is checked before ownership, so an unknown id yields
        AgentNotFound whatever email is supplied.

        Raises:
            EmailRequired: If email is missing or blank
            AgentNotFound: If no agent has this id
            EmailMismatch: If email does not match the registration email
        """
        if email is None or not email.strip():
            raise EmailRequired()

        record = self._get(public_id)
        if not record.is_owned_by(email):
            raise EmailMismatch()
        return record

    def list_recent(self, limit: int | None = None) -> RecentAgents:
        """List the most recently registered agents alongside the total count."""
        limit = clamp_limit(limit, self.default_limit, self.max_limit)
        agents = self.repository.list_recent(limit)
        return RecentAgents(agents=agents, total=self.repository.count_agents())

    def recent_attempts(self, limit: int | None = None) -> list[RegistrationAttempt]:
        """List the most recent attempt log entries."""
        limit = clamp_limit(limit, self.default_attempts_limit, self.max_limit)
        return self.attempt_log.recent(limit)

    def log_attempt(self, event: str | None, data: dict[str, Any] | None) -> bool:
        """Record an attempt reported by an external client."""
        data = data or {}
        return self.attempt_log.record(
            RegistrationAttempt(
                event_type=event or "unknown",
                email=_str_or_none(data.get("email")),
                agent_name=_str_or_none(data.get("agentName") or data.get("name")),
                source=_str_or_none(data.get("source")) or "unknown",
                data=data,
            )
        )

    def stats(self, now: datetime | None = None) -> RegistryStats:
        """Compute aggregate counters from the store."""
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(hours=self.stats_window_hours)
        return RegistryStats(
            total_agents=self.repository.count_agents(),
            recent_agents=self.repository.count_agents_since(since),
            queue_depth=self.repository.count_notifications(),
            attempts=self.attempt_log.summary(),
            window_hours=self.stats_window_hours,
            server_time=now,
        )

    def _get(self, public_id: str) -> AgentRecord:
        record = self.repository.get_agent(public_id)
        if record is None:
            raise AgentNotFound(public_id)
        return record


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None
