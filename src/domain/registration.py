"""
Registration domain service - Agent record lifecycle.

This module contains the core business logic for agent registration:
input validation, identifier allocation and atomic persistence of the
agent record together with its notification job.

Lifecycle
=========

An agent record is created once, here, and never mutated or deleted.
Its status is REGISTERED from creation on and its blockchain status stays
PENDING; neither has a transition yet.

Atomicity
=========

The record and its notification job are handed to the repository in a
single ``create_agent`` call, which commits both or neither. Validation
failures are raised before any write is attempted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .exceptions import IncompleteAgentData, InvalidEmail, PersistenceFailure
from .identifiers import IdentifierTier, generate_internal_id, generate_public_id, trust_score_label
from .models import (
    DEFAULT_AGENT_VERSION,
    AgentData,
    AgentInput,
    AgentRecord,
    AgentStatus,
    AttemptEvent,
    BlockchainStatus,
    NotificationJob,
    RegistrationAttempt,
    RegistrationMetadata,
    RequestContext,
)
from .ports import AgentRepository, AttemptLog

logger = logging.getLogger(__name__)

NOTIFICATION_SUBJECT = "AstraSync Agent Registration Confirmed"
NOTIFICATION_TEMPLATE = "registration_confirmed"


@dataclass
class RegistrationService:
    """
    Domain service for agent registration.

    Orchestrates the registration flow: validation, id generation,
    record and notification construction, and atomic persistence.
    """

    repository: AgentRepository
    attempt_log: AttemptLog
    tier: str = IdentifierTier.TEMP.value
    trust_score_percentage: int = 95

    def register(
        self,
        email: str | None,
        agent_input: AgentInput | None,
        context: RequestContext | None = None,
    ) -> AgentRecord:
        """
        Register a new agent.

        Args:
            email: Owner email as received (minimal check: a non-blank string
                containing '@'; any other value is rejected)
            agent_input: Agent payload; name and owner are required
            context: Request provenance stored as audit metadata

        Returns:
            The persisted agent record

        Raises:
            InvalidEmail: Email absent or malformed
            IncompleteAgentData: Agent payload missing name or owner
            PersistenceFailure: Store rejected the write (nothing was persisted)
        """
        context = context or RequestContext()
        # Raw request values may be any JSON type; only strings reach the log
        email_text = email if isinstance(email, str) and email else None
        agent_name = agent_input.name if agent_input is not None else None
        agent_name = agent_name if isinstance(agent_name, str) and agent_name else None

        self._log(AttemptEvent.REGISTRATION_ATTEMPT, email_text, agent_name, context)

        if not self._is_valid_email(email):
            self._log(
                AttemptEvent.REGISTRATION_FAILED,
                email_text or "invalid-email",
                agent_name,
                context,
                error=InvalidEmail.default_message,
            )
            raise InvalidEmail()

        if agent_input is None or not _present(agent_input.name) or not _present(agent_input.owner):
            self._log(
                AttemptEvent.REGISTRATION_FAILED,
                email,
                agent_name or "missing-name",
                context,
                error=IncompleteAgentData.default_message,
                missingFields={
                    "hasAgent": agent_input is not None,
                    "hasName": agent_input is not None and _present(agent_input.name),
                    "hasOwner": agent_input is not None and _present(agent_input.owner),
                },
            )
            raise IncompleteAgentData()

        record = self._build_record(self._normalize_email(email), agent_input, context)
        notification = self._build_notification(record)

        try:
            self.repository.create_agent(record, notification)
        except PersistenceFailure as e:
            logger.error(
                "Registration failed for %s (request_id=%s)",
                record.public_id,
                e.request_id,
                exc_info=e,
            )
            self._log(
                AttemptEvent.REGISTRATION_ERROR,
                record.email,
                record.agent.name,
                context,
                error=e.message,
                requestId=e.request_id,
            )
            raise

        self._log(
            AttemptEvent.REGISTRATION_SUCCESS,
            record.email,
            record.agent.name,
            context,
            agentId=record.public_id,
            agent=record.agent.to_dict(),
        )
        logger.info(
            "New agent registered: %s - %s (%s)",
            record.public_id,
            record.agent.name,
            record.email,
        )
        return record

    def _build_record(
        self, email: str, agent_input: AgentInput, context: RequestContext
    ) -> AgentRecord:
        agent = AgentData(
            name=agent_input.name,
            owner=agent_input.owner,
            description=agent_input.description or "",
            owner_url=agent_input.owner_url or "",
            capabilities=tuple(agent_input.capabilities or ()),
            version=agent_input.version or DEFAULT_AGENT_VERSION,
        )
        metadata = RegistrationMetadata(
            source=context.source,
            ip=context.ip,
            user_agent=context.user_agent or "unknown",
        )
        return AgentRecord(
            public_id=generate_public_id(self.tier),
            internal_id=generate_internal_id(),
            email=email,
            status=AgentStatus.REGISTERED,
            blockchain_status=BlockchainStatus.PENDING,
            trust_score=trust_score_label(self.tier, self.trust_score_percentage),
            registered_at=datetime.now(timezone.utc),
            agent=agent,
            metadata=metadata,
        )

    def _build_notification(self, record: AgentRecord) -> NotificationJob:
        return NotificationJob(
            recipient=record.email,
            subject=NOTIFICATION_SUBJECT,
            template=NOTIFICATION_TEMPLATE,
            data={
                "agentId": record.public_id,
                "agentName": record.agent.name,
                "timestamp": record.registered_at.isoformat(),
            },
            created_at=record.registered_at,
        )

    def _log(
        self,
        event: AttemptEvent,
        email: str | None,
        agent_name: str | None,
        context: RequestContext,
        **data: object,
    ) -> None:
        """Record an attempt event. Failures are reported by the log itself."""
        data.setdefault("ip", context.ip)
        data.setdefault("userAgent", context.user_agent)
        self.attempt_log.record(
            RegistrationAttempt(
                event_type=event.value,
                email=email,
                agent_name=agent_name,
                source=context.source,
                data={key: value for key, value in data.items() if value is not None},
            )
        )

    def _is_valid_email(self, email: str | None) -> bool:
        """Minimal syntactic check: a non-blank string containing '@'."""
        return isinstance(email, str) and bool(email.strip()) and "@" in email

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()


def _present(value: str | None) -> bool:
    return isinstance(value, str) and bool(value.strip())
