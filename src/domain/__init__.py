"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for the agent registry:
identifier generation, registration and read queries. It defines its own
port interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .exceptions import (
    AgentNotFound,
    AgentValidationError,
    AuthorizationError,
    EmailMismatch,
    EmailRequired,
    IdentifierConflict,
    IncompleteAgentData,
    InvalidEmail,
    PersistenceFailure,
    RegistryError,
)
from .models import (
    AgentData,
    AgentInput,
    AgentRecord,
    AgentStatus,
    BlockchainStatus,
    NotificationJob,
    RegistrationAttempt,
    RequestContext,
)
from .ports import AgentRepository, AttemptLog
from .queries import AgentQueryService
from .registration import RegistrationService

__all__ = [
    "AgentData",
    "AgentInput",
    "AgentNotFound",
    "AgentQueryService",
    "AgentRecord",
    "AgentRepository",
    "AgentStatus",
    "AgentValidationError",
    "AttemptLog",
    "AuthorizationError",
    "BlockchainStatus",
    "EmailMismatch",
    "EmailRequired",
    "IdentifierConflict",
    "IncompleteAgentData",
    "InvalidEmail",
    "NotificationJob",
    "PersistenceFailure",
    "RegistrationAttempt",
    "RegistrationService",
    "RegistryError",
    "RequestContext",
]
