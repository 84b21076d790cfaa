"""
Domain models - Immutable records of the agent registry.

Agent records are append-only ledger entries: created once by the
registration service and never updated or deleted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_AGENT_VERSION = "1.0.0"


class AgentStatus(str, Enum):
    """
    Agent lifecycle status.

    REGISTERED is both the initial and the terminal state; there is no
    transition to verified, revoked or transferred yet.
    """

    REGISTERED = "registered"


class BlockchainStatus(str, Enum):
    """
    Placeholder for on-chain anchoring.

    Designed as PENDING -> CONFIRMED, but nothing triggers the transition,
    so every record stays PENDING.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"


class AttemptEvent(str, Enum):
    """Event types written to the attempt log by this service."""

    REGISTRATION_ATTEMPT = "registration_attempt"
    REGISTRATION_FAILED = "registration_failed"
    REGISTRATION_SUCCESS = "registration_success"
    REGISTRATION_ERROR = "registration_error"
    VERIFICATION_ATTEMPT = "verification_attempt"


@dataclass(frozen=True)
class AgentInput:
    """Raw agent payload as supplied by the registrant. Nothing is validated yet."""

    name: str | None = None
    owner: str | None = None
    description: str | None = None
    owner_url: str | None = None
    capabilities: list[str] | None = None
    version: str | None = None


@dataclass(frozen=True)
class RequestContext:
    """Provenance of an inbound request."""

    source: str = "direct-api"
    ip: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AgentData:
    """Descriptive data of a registered agent."""

    name: str
    owner: str
    description: str = ""
    owner_url: str = ""
    capabilities: tuple[str, ...] = ()
    version: str = DEFAULT_AGENT_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "owner": self.owner,
            "ownerUrl": self.owner_url,
            "capabilities": list(self.capabilities),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AgentData":
        return cls(
            name=data["name"],
            owner=data["owner"],
            description=data.get("description", ""),
            owner_url=data.get("ownerUrl", ""),
            capabilities=tuple(data.get("capabilities", ())),
            version=data.get("version", DEFAULT_AGENT_VERSION),
        )


@dataclass(frozen=True)
class RegistrationMetadata:
    """Write-once audit data recorded with each registration."""

    source: str
    ip: str | None
    user_agent: str
    registration_method: str = "api"
    api_version: str = "v1"

    def to_dict(self) -> dict[str, Any]:
        return {
            "registrationMethod": self.registration_method,
            "apiVersion": self.api_version,
            "ip": self.ip,
            "userAgent": self.user_agent,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RegistrationMetadata":
        return cls(
            source=data.get("source", "direct-api"),
            ip=data.get("ip"),
            user_agent=data.get("userAgent", "unknown"),
            registration_method=data.get("registrationMethod", "api"),
            api_version=data.get("apiVersion", "v1"),
        )


@dataclass(frozen=True)
class AgentRecord:
    """
    A registered agent.

    ``internal_id``, ``email`` and ``metadata`` are private to the owner;
    public projections must only expose the id, status fields, trust score
    and the name/owner/version of ``agent``.
    """

    public_id: str
    internal_id: str
    email: str
    status: AgentStatus
    blockchain_status: BlockchainStatus
    trust_score: str
    registered_at: datetime
    agent: AgentData
    metadata: RegistrationMetadata

    def is_owned_by(self, email: str) -> bool:
        """Case-insensitive email match (the only ownership check there is)."""
        return email.strip().lower() == self.email.lower()


@dataclass(frozen=True)
class NotificationJob:
    """Pending outbound message, consumed by an external mailer."""

    recipient: str
    subject: str
    template: str
    data: dict[str, Any]
    created_at: datetime


@dataclass(frozen=True)
class RegistrationAttempt:
    """One entry of the registration attempt log."""

    event_type: str
    email: str | None = None
    agent_name: str | None = None
    source: str = "unknown"
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass(frozen=True)
class AttemptSummary:
    """Aggregate counts over the attempt log."""

    total: int
    by_event: dict[str, int]

    def count(self, event_type: str) -> int:
        return self.by_event.get(event_type, 0)


@dataclass(frozen=True)
class RecentAgents:
    """Result of a recent listing: the page plus the overall record count."""

    agents: list[AgentRecord]
    total: int


@dataclass(frozen=True)
class RegistryStats:
    """Aggregate counters derived entirely from the store."""

    total_agents: int
    recent_agents: int
    queue_depth: int
    attempts: AttemptSummary
    window_hours: int
    server_time: datetime

    @property
    def conversion_rate(self) -> str:
        if self.attempts.total <= 0:
            return "N/A"
        return f"{self.total_agents / self.attempts.total * 100:.2f}%"
