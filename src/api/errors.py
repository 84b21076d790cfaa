"""
Exception handlers - Map domain errors to HTTP responses.

Every error body has the shape ``{"error", "code", "message"}``; server
faults add a ``requestId`` that is also written to the server log with the
root cause. Internal details never reach the response.
"""

import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.models import ErrorResponse
from src.domain.exceptions import (
    AgentNotFound,
    AgentValidationError,
    AuthorizationError,
    PersistenceFailure,
    RegistryError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[RegistryError], int]] = [
    (AgentValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (AgentNotFound, status.HTTP_404_NOT_FOUND),
    (PersistenceFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def error_response(status_code: int, body: ErrorResponse, **extra: str) -> JSONResponse:
    content = body.model_dump(by_alias=True, exclude_none=True)
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = mapped_status
            break

    request_id = getattr(exc, "request_id", None)
    message = exc.message
    if status_code >= 500:
        message = exc.default_message
        request_id = request_id or str(uuid.uuid4())
        logger.error(
            "%s %s failed (request_id=%s): %s",
            request.method,
            request.url.path,
            request_id,
            exc,
            exc_info=exc,
        )

    return error_response(
        status_code,
        ErrorResponse(error=exc.error, code=exc.code, message=message, request_id=request_id),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in error["loc"][1:]) for error in exc.errors()})
    fields = [field for field in fields if field]
    message = f"Malformed request fields: {', '.join(fields)}" if fields else "Malformed request"
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(error="Invalid request", code="InvalidRequest", message=message),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(
            exc.status_code,
            ErrorResponse(
                error="Not found",
                code="NotFound",
                message=f"Endpoint {request.method} {request.url.path} not found",
            ),
            documentation=str(request.base_url) + "v1/docs",
        )
    return error_response(
        exc.status_code,
        ErrorResponse(error=str(exc.detail), code="HTTPError", message=str(exc.detail)),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = str(uuid.uuid4())
    logger.error(
        "Unhandled error on %s %s (request_id=%s)",
        request.method,
        request.url.path,
        request_id,
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(
            error="Internal server error",
            code="InternalError",
            message="An unexpected error occurred",
            request_id=request_id,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the registry's exception handlers on ``app``."""
    app.add_exception_handler(RegistryError, registry_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
