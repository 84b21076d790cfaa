"""
API v1 routes.

Defines REST endpoints for the AstraSync Agent Registry API.
Domain errors propagate to the handlers in src.api.errors.
Handlers that reach the store are plain ``def``; FastAPI runs them in its
threadpool because the storage adapters block.
"""

import time
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status

from src.api.dependencies import (
    get_query_service,
    get_registration_service,
    get_request_context,
)
from src.api.models import (
    AgentDetailsResponse,
    AgentSummary,
    AttemptEntry,
    AttemptsResponse,
    ErrorResponse,
    LogAttemptRequest,
    LogAttemptResponse,
    RecentAgentsResponse,
    RegisterLinks,
    RegisterRequest,
    RegisterResponse,
    StatsResponse,
    VerifyResponse,
)
from src.config.settings import Settings, get_settings
from src.domain.models import RequestContext
from src.domain.queries import AgentQueryService
from src.domain.registration import RegistrationService

API_VERSION = "0.1.0"

router = APIRouter(tags=["v1"])


def _parse_limit(raw: str | None) -> int | None:
    """Lenient integer parse: anything unparseable falls back to the default."""
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email or incomplete agent data"},
        500: {"model": ErrorResponse, "description": "Registration could not be persisted"},
    },
    summary="Register a new AI agent",
    description="Submit an owner email and agent description. Issues a preview-tier "
    "agent id and queues a confirmation email.",
)
def register(
    request_data: RegisterRequest,
    request: Request,
    context: RequestContext = Depends(get_request_context),
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_settings),
) -> RegisterResponse:
    """
    Register a new agent.

    - **email**: Owner email address (must contain '@')
    - **agent.name**, **agent.owner**: Required
    - **agent.description**, **agent.ownerUrl**, **agent.capabilities**, **agent.version**: Optional

    The optional ``x-source`` header identifies the calling channel.
    """
    agent_input = request_data.agent.to_input() if request_data.agent is not None else None
    record = service.register(request_data.email, agent_input, context)

    links = RegisterLinks(
        verify=str(request.url_for("verify_agent", agent_id=record.public_id)),
        dashboard=settings.dashboard_url,
        create_account=settings.create_account_url,
    )
    return RegisterResponse.from_record(record, links)


@router.get(
    "/verify/{agent_id}",
    response_model=VerifyResponse,
    responses={404: {"model": ErrorResponse, "description": "Agent not found"}},
    summary="Verify an agent",
    description="Confirm an agent id exists and return its public information.",
)
def verify_agent(
    agent_id: str,
    context: RequestContext = Depends(get_request_context),
    service: AgentQueryService = Depends(get_query_service),
    settings: Settings = Depends(get_settings),
) -> VerifyResponse:
    record = service.verify(agent_id, source=context.source)
    return VerifyResponse.from_record(record, settings.create_account_url)


@router.get(
    "/agent/{agent_id}",
    response_model=AgentDetailsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email parameter missing"},
        403: {"model": ErrorResponse, "description": "Email does not match registration"},
        404: {"model": ErrorResponse, "description": "Agent not found"},
    },
    summary="Get full agent details",
    description="Return the complete record when the email matches the registration email.",
)
def get_agent_details(
    agent_id: str,
    email: str | None = Query(None, description="Registration email"),
    service: AgentQueryService = Depends(get_query_service),
) -> AgentDetailsResponse:
    record = service.get_details(agent_id, email)
    return AgentDetailsResponse.from_record(record)


@router.get(
    "/agents/recent",
    response_model=RecentAgentsResponse,
    summary="List recently registered agents",
)
def list_recent_agents(
    limit: str | None = Query(None, description="Number of agents to return (max 100)"),
    service: AgentQueryService = Depends(get_query_service),
) -> RecentAgentsResponse:
    recent = service.list_recent(_parse_limit(limit))
    agents = [
        AgentSummary(
            agent_id=record.public_id,
            name=record.agent.name,
            owner=record.agent.owner,
            registered_at=record.registered_at,
            trust_score=record.trust_score,
        )
        for record in recent.agents
    ]
    return RecentAgentsResponse(agents=agents, total=recent.total, returned=len(agents))


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Registration statistics",
    description="Aggregate counters derived from the store, including attempt statistics.",
)
def get_stats(
    request: Request,
    service: AgentQueryService = Depends(get_query_service),
) -> StatsResponse:
    stats = service.stats()
    return StatsResponse.from_stats(
        stats,
        uptime=time.monotonic() - request.app.state.started_at,
        api_version=API_VERSION,
    )


@router.post(
    "/log-attempt",
    response_model=LogAttemptResponse,
    summary="Log a registration attempt",
    description="Record an attempt reported by an external client such as an MCP tool.",
)
def log_attempt(
    request_data: LogAttemptRequest,
    service: AgentQueryService = Depends(get_query_service),
) -> LogAttemptResponse:
    logged = service.log_attempt(request_data.event, request_data.data)
    return LogAttemptResponse(logged=logged)


@router.get(
    "/attempts/recent",
    response_model=AttemptsResponse,
    summary="List recent registration attempts",
)
def list_recent_attempts(
    limit: str | None = Query(None, description="Number of attempts to return (max 100)"),
    service: AgentQueryService = Depends(get_query_service),
) -> AttemptsResponse:
    attempts = [AttemptEntry.from_attempt(a) for a in service.recent_attempts(_parse_limit(limit))]
    return AttemptsResponse(attempts=attempts, total=len(attempts))


@router.get("/docs", summary="Endpoint catalogue")
async def api_docs(request: Request) -> dict[str, Any]:
    """Machine-readable list of v1 endpoints."""
    base_url = str(request.base_url).rstrip("/")
    return {
        "version": "v1",
        "baseUrl": base_url,
        "endpoints": [
            {
                "method": "POST",
                "path": "/v1/register",
                "description": "Register a new AI agent",
                "required": ["email", "agent.name", "agent.owner"],
                "optional": [
                    "agent.description",
                    "agent.capabilities",
                    "agent.version",
                    "agent.ownerUrl",
                ],
                "headers": ["x-source (optional) - Identifies the source of the request"],
            },
            {
                "method": "GET",
                "path": "/v1/verify/:agentId",
                "description": "Verify an agent exists and get basic info",
            },
            {
                "method": "GET",
                "path": "/v1/agent/:agentId?email=xxx",
                "description": "Get full agent details (requires matching email)",
            },
            {
                "method": "GET",
                "path": "/v1/agents/recent?limit=10",
                "description": "Get recently registered agents (max 100)",
            },
            {
                "method": "GET",
                "path": "/v1/stats",
                "description": "Get registration statistics and system status",
            },
            {
                "method": "POST",
                "path": "/v1/log-attempt",
                "description": "Log registration attempts reported by external clients",
            },
            {
                "method": "GET",
                "path": "/v1/attempts/recent?limit=20",
                "description": "Get recent registration attempts (max 100)",
            },
        ],
        "openapi": f"{base_url}/docs",
    }
