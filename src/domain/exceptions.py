"""
Domain exceptions - Semantic error types for the agent registry.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Every exception carries a machine-stable ``code`` and a short ``error``
label so the API layer can render it without inspecting the message.
"""

import uuid


class RegistryError(Exception):
    """Base class for registry domain errors."""

    code = "RegistryError"
    error = "Registry error"
    default_message = "An unexpected registry error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AgentValidationError(RegistryError):
    """Client-supplied input failed validation. Never persisted, never retried."""

    code = "ValidationError"
    error = "Invalid request"
    default_message = "The request could not be validated"


class InvalidEmail(AgentValidationError):
    """Email is absent or lacks an '@'."""

    code = "InvalidEmail"
    error = "Valid email address is required"
    default_message = "Please provide a valid email address for agent registration"


class IncompleteAgentData(AgentValidationError):
    """Agent payload is missing its name or owner."""

    code = "IncompleteAgentData"
    error = "Incomplete agent data"
    default_message = "Agent must have at least name and owner fields"


class EmailRequired(AgentValidationError):
    """Detail lookup attempted without an email."""

    code = "EmailRequired"
    error = "Email required"
    default_message = "Please provide email parameter for verification"


class AuthorizationError(RegistryError):
    """Caller is not allowed to see the requested record."""

    code = "Unauthorized"
    error = "Unauthorized"
    default_message = "Caller is not authorized for this agent"


class EmailMismatch(AuthorizationError):
    """Supplied email does not match the registration email."""

    default_message = "Email does not match agent registration"


class AgentNotFound(RegistryError):
    """No agent exists with the given public id."""

    code = "AgentNotFound"
    error = "Agent not found"

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"No agent found with ID: {agent_id}")


class PersistenceFailure(RegistryError):
    """
    The backing store failed or rejected a write.

    Carries a fresh ``request_id`` for support traceability. The root cause
    is chained via ``__cause__`` and logged server side only.
    """

    code = "PersistenceFailure"
    error = "Internal server error"
    default_message = "Failed to complete the request. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.request_id = str(uuid.uuid4())
        super().__init__(message)


class IdentifierConflict(PersistenceFailure):
    """Generated public id collided with an existing record."""

    code = "IdentifierConflict"

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent id already exists: {agent_id}")
