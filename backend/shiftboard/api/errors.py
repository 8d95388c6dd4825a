"""
Translation of domain failures into HTTP responses.

Every ErrorType has an explicit status code; all errors share the
ErrorResponse envelope ``{"error", "type", "details"}``.
"""

from typing import TypeVar

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shiftboard.application.dtos import ErrorResponse
from shiftboard.core.observability import get_logger
from shiftboard.domain.shared import DomainError, ErrorType, Failure, Result

logger = get_logger(__name__)

T = TypeVar("T")

ERROR_STATUS_CODES: dict[ErrorType, int] = {
    ErrorType.VALIDATION: 422,
    ErrorType.OUT_OF_RANGE: 422,
    ErrorType.CONFLICT: 409,
    ErrorType.FORBIDDEN: 403,
    ErrorType.NOT_FOUND: 404,
    ErrorType.DUPLICATE_KEY: 409,
    ErrorType.INVALID_TRANSITION: 409,
    ErrorType.REPOSITORY_UNAVAILABLE: 503,
    ErrorType.UNAUTHENTICATED: 401,
}

# Shared `responses` entries for route declarations
ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    403: {"model": ErrorResponse, "description": "Role not allowed"},
    503: {"model": ErrorResponse, "description": "Storage unavailable"},
}


def unwrap(result: Result[T, DomainError]) -> T:
    """Return a success value or raise the failure's error for the handler."""
    if isinstance(result, Failure):
        raise result.error
    return result.value


def error_response(error: DomainError) -> JSONResponse:
    body = ErrorResponse(
        error=error.message, type=error.error_type.value, details=error.details
    )
    headers = None
    if error.error_type == ErrorType.UNAUTHENTICATED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=ERROR_STATUS_CODES[error.error_type],
        content=jsonable_encoder(body),
        headers=headers,
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.error_type == ErrorType.REPOSITORY_UNAVAILABLE:
        logger.error(
            "Request failed on storage",
            path=request.url.path,
            error=exc.message,
            details=exc.details,
        )
    return error_response(exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI payload validation failures in the common envelope."""
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = str(error.get("msg", "Invalid value"))
        # pydantic prefixes messages raised from validators
        message = message.removeprefix("Value error, ")
        errors.append({"field": ".".join(location), "message": message})

    summary = "; ".join(
        f"{e['field']}: {e['message']}" if e["field"] else e["message"]
        for e in errors
    )
    body = ErrorResponse(
        error=summary or "Invalid request",
        type=ErrorType.VALIDATION.value,
        details={"errors": errors},
    )
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(body),
    )
