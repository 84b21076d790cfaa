"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON fields are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.models import AgentInput, AgentRecord, BlockchainStatus, RegistrationAttempt, RegistryStats

BLOCKCHAIN_QUEUED_MESSAGE = "Blockchain registration queued. You will be notified upon completion."
BLOCKCHAIN_PENDING_MESSAGE = "Blockchain registration pending security audit completion"
BLOCKCHAIN_CONFIRMED_MESSAGE = "Registered on blockchain"
REGISTERED_MESSAGE = (
    "Agent registered successfully in DEVELOPER PREVIEW mode. Your TEMP credentials will "
    "automatically convert to permanent blockchain-verified credentials when you create an "
    "account at {create_account_url} using the same email address."
)
PREVIEW_VERIFIED_MESSAGE = (
    "This is a DEVELOPER PREVIEW agent. Create an account at {create_account_url} "
    "to convert to permanent credentials."
)
VERIFIED_MESSAGE = "Agent verified successfully"


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AgentPayload(CamelModel):
    """
    Agent fields of a registration request.

    Everything is optional here and name/owner accept any JSON value;
    required fields are enforced by the domain so that a missing or
    non-string name/owner yields IncompleteAgentData.
    """

    name: Any = None
    owner: Any = None
    description: str | None = None
    owner_url: str | None = None
    capabilities: list[str] | None = None
    version: str | None = None

    def to_input(self) -> AgentInput:
        return AgentInput(
            name=self.name,
            owner=self.owner,
            description=self.description,
            owner_url=self.owner_url,
            capabilities=self.capabilities,
            version=self.version,
        )


class RegisterRequest(BaseModel):
    """Request model for agent registration."""

    # Any JSON value; the domain rejects non-strings as InvalidEmail
    email: Any = Field(None, description="Owner email address")
    agent: AgentPayload | None = None


class BlockchainInfo(BaseModel):
    status: BlockchainStatus
    message: str


class RegisterLinks(CamelModel):
    verify: str
    dashboard: str
    create_account: str


class RegisterResponse(CamelModel):
    """Response model for successful registration."""

    agent_id: str
    status: str
    blockchain: BlockchainInfo
    trust_score: str
    message: str
    links: RegisterLinks
    registered_at: datetime

    @classmethod
    def from_record(cls, record: AgentRecord, links: RegisterLinks) -> "RegisterResponse":
        return cls(
            agent_id=record.public_id,
            status=record.status.value,
            blockchain=BlockchainInfo(
                status=record.blockchain_status,
                message=BLOCKCHAIN_QUEUED_MESSAGE,
            ),
            trust_score=record.trust_score,
            message=REGISTERED_MESSAGE.format(create_account_url=links.create_account),
            links=links,
            registered_at=record.registered_at,
        )


class PublicAgent(BaseModel):
    """Public subset of agent data."""

    name: str
    owner: str
    version: str


class VerifyResponse(CamelModel):
    """Public verification view. Never carries email, internal id or metadata."""

    agent_id: str
    status: str
    blockchain: BlockchainInfo
    trust_score: str
    agent: PublicAgent
    registered_at: datetime
    verified: bool = True
    message: str

    @classmethod
    def from_record(cls, record: AgentRecord, create_account_url: str) -> "VerifyResponse":
        if record.blockchain_status == BlockchainStatus.CONFIRMED:
            blockchain_message = BLOCKCHAIN_CONFIRMED_MESSAGE
        else:
            blockchain_message = BLOCKCHAIN_PENDING_MESSAGE

        if record.trust_score.startswith("TEMP"):
            message = PREVIEW_VERIFIED_MESSAGE.format(create_account_url=create_account_url)
        else:
            message = VERIFIED_MESSAGE

        return cls(
            agent_id=record.public_id,
            status=record.status.value,
            blockchain=BlockchainInfo(status=record.blockchain_status, message=blockchain_message),
            trust_score=record.trust_score,
            agent=PublicAgent(
                name=record.agent.name,
                owner=record.agent.owner,
                version=record.agent.version,
            ),
            registered_at=record.registered_at,
            message=message,
        )


class AgentDetails(CamelModel):
    name: str
    description: str
    owner: str
    owner_url: str
    capabilities: list[str]
    version: str


class AgentMetadata(CamelModel):
    registration_method: str
    api_version: str
    ip: str | None
    user_agent: str
    source: str


class AgentDetailsResponse(CamelModel):
    """Full record view for the owner."""

    id: str
    internal_id: str
    email: str
    status: str
    blockchain_status: str
    trust_score: str
    registered_at: datetime
    agent: AgentDetails
    metadata: AgentMetadata

    @classmethod
    def from_record(cls, record: AgentRecord) -> "AgentDetailsResponse":
        return cls(
            id=record.public_id,
            internal_id=record.internal_id,
            email=record.email,
            status=record.status.value,
            blockchain_status=record.blockchain_status.value,
            trust_score=record.trust_score,
            registered_at=record.registered_at,
            agent=AgentDetails.model_validate(record.agent.to_dict()),
            metadata=AgentMetadata.model_validate(record.metadata.to_dict()),
        )


class AgentSummary(CamelModel):
    agent_id: str
    name: str
    owner: str
    registered_at: datetime
    trust_score: str


class RecentAgentsResponse(BaseModel):
    """Response model for the recent agents listing."""

    agents: list[AgentSummary]
    total: int
    returned: int


class CustomerIntelligence(CamelModel):
    total_attempts: int
    failed_attempts: int
    error_count: int
    conversion_rate: str
    event_breakdown: dict[str, int]


class StatsResponse(CamelModel):
    """Aggregate registry statistics."""

    total_agents: int
    last_24_hours: int = Field(..., alias="last24Hours")
    blockchain_status: str = "pending_audit"
    email_queue_size: int
    customer_intelligence: CustomerIntelligence
    server_time: datetime
    database_status: str = "connected"
    uptime: float
    api_version: str

    @classmethod
    def from_stats(cls, stats: RegistryStats, uptime: float, api_version: str) -> "StatsResponse":
        return cls(
            total_agents=stats.total_agents,
            last_24_hours=stats.recent_agents,
            email_queue_size=stats.queue_depth,
            customer_intelligence=CustomerIntelligence(
                total_attempts=stats.attempts.total,
                failed_attempts=stats.attempts.count("registration_failed"),
                error_count=stats.attempts.count("registration_error"),
                conversion_rate=stats.conversion_rate,
                event_breakdown=stats.attempts.by_event,
            ),
            server_time=stats.server_time,
            uptime=uptime,
            api_version=api_version,
        )


class LogAttemptRequest(BaseModel):
    """Attempt reported by an external client (e.g. an MCP tool)."""

    event: str | None = None
    data: dict[str, Any] | None = None


class LogAttemptResponse(BaseModel):
    logged: bool


class AttemptEntry(BaseModel):
    event_type: str
    email: str | None
    agent_name: str | None
    source: str | None
    created_at: datetime | None
    error_message: str | None

    @classmethod
    def from_attempt(cls, attempt: RegistrationAttempt) -> "AttemptEntry":
        error = attempt.data.get("error")
        return cls(
            event_type=attempt.event_type,
            email=attempt.email,
            agent_name=attempt.agent_name,
            source=attempt.source,
            created_at=attempt.created_at,
            error_message=error if isinstance(error, str) else None,
        )


class AttemptsResponse(BaseModel):
    attempts: list[AttemptEntry]
    total: int


class ErrorResponse(CamelModel):
    """Standard error response model."""

    error: str
    code: str
    message: str
    request_id: str | None = None
