"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Depends, Request

from src.config.settings import Settings, get_settings
from src.domain.models import RequestContext
from src.domain.ports import AgentRepository, AttemptLog
from src.domain.queries import AgentQueryService
from src.domain.registration import RegistrationService


def get_repository(request: Request) -> AgentRepository:
    """
    Get the agent repository from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_attempt_log(request: Request) -> AttemptLog:
    """Get the attempt log from app state."""
    return request.app.state.attempt_log


def get_registration_service(
    repository: AgentRepository = Depends(get_repository),
    attempt_log: AttemptLog = Depends(get_attempt_log),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository, attempt log and id tier for the domain service.
    """
    return RegistrationService(
        repository=repository,
        attempt_log=attempt_log,
        tier=settings.id_tier,
        trust_score_percentage=settings.trust_score_percentage,
    )


def get_query_service(
    repository: AgentRepository = Depends(get_repository),
    attempt_log: AttemptLog = Depends(get_attempt_log),
    settings: Settings = Depends(get_settings),
) -> AgentQueryService:
    """Create query service with listing limits from settings."""
    return AgentQueryService(
        repository=repository,
        attempt_log=attempt_log,
        default_limit=settings.recent_default_limit,
        max_limit=settings.recent_max_limit,
        default_attempts_limit=settings.attempts_default_limit,
        stats_window_hours=settings.stats_window_hours,
    )


def get_request_context(request: Request) -> RequestContext:
    """
    Extract request provenance for audit metadata.

    Source comes from the ``x-source`` header (e.g. "mcp", "web-ui").
    """
    return RequestContext(
        source=request.headers.get("x-source") or "direct-api",
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
