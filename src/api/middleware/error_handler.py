"""Global exception handlers for the FastAPI application.

Status mapping:
- ``OrderValidationError`` and other ``ValidationError``: 400
- ``NotFoundError``: 404
- ``InfrastructureError`` (including ``BatchCommitError``) and any other
  ``CatalogError``: 500
- ``RequestValidationError``: 422
- anything unhandled: 500 with an opaque message

Expected errors are logged at warning level and unexpected ones at error
level, always with sanitized context. Exception text of causes and
unhandled errors goes to the logs only, never into a response.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.constants import INTERNAL_ERROR_MESSAGE
from src.api.schemas.errors import ErrorResponse, ServiceInfo
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.context import RequestContext, generate_request_id
from src.core.error_context import sanitize_error_context
from src.core.exceptions import (
    CatalogError,
    ErrorCode,
    NotFoundError,
    Severity,
    ValidationError,
)
from src.core.types import FieldErrors


def get_service_info(settings: Settings) -> ServiceInfo:
    """Create ServiceInfo from application settings."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def _request_id(request: Request) -> str:
    """Request ID assigned by the logging middleware, or a fresh one."""
    return getattr(request.state, "request_id", None) or generate_request_id()


def _error_response(
    request: Request,
    status_code: int,
    *,
    error_code: str,
    message: str,
    severity: Severity,
    details: dict[str, object] | None = None,
    debug_info: dict[str, object] | None = None,
) -> Response:
    settings = get_settings()
    error_response = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        correlation_id=RequestContext.get_correlation_id(),
        request_id=_request_id(request),
        severity=severity.value,
        service_info=get_service_info(settings),
        debug_info=debug_info if settings.environment == "development" else None,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


def status_code_for(exc: CatalogError) -> int:
    """HTTP status code for a catalog error."""
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def catalog_error_handler(request: Request, exc: Exception) -> Response:
    """Handle CatalogError exceptions.

    Raises:
        TypeError: If exc is not a CatalogError instance
    """
    if not isinstance(exc, CatalogError):
        raise TypeError(f"Expected CatalogError, got {type(exc).__name__}")

    status_code = status_code_for(exc)
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
            "fingerprint": exc.fingerprint,
            "status_code": status_code,
        },
    )
    if exc.cause is not None:
        error_context["cause_type"] = type(exc.cause).__name__
        error_context["cause_message"] = str(exc.cause)

    log = logger.warning if exc.is_expected else logger.error
    log("Handling {}: {}", type(exc).__name__, exc.message, **error_context)

    return _error_response(
        request,
        status_code,
        error_code=exc.error_code,
        message=exc.message,
        severity=exc.severity,
        details=exc.context or None,
        debug_info={
            "stack_trace": exc.stack_trace,
            "exception_type": type(exc).__name__,
            "cause_type": type(exc.cause).__name__ if exc.cause else None,
        },
    )


def collect_field_errors(exc: RequestValidationError) -> FieldErrors:
    """Group schema validation errors by dotted field path."""
    field_errors: FieldErrors = {}
    for error in exc.errors():
        field_path = error.get("loc", ())
        field_name = ".".join(str(loc) for loc in field_path[1:] if loc != "__root__")
        field_errors.setdefault(field_name or "root", []).append(
            error.get("msg", "Invalid value")
        )
    return field_errors


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle request bodies or parameters that do not match their schema.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    field_errors = collect_field_errors(exc)
    logger.warning(
        "Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        **sanitize_error_context(
            exc,
            {
                "path": str(request.url.path),
                "method": request.method,
                "validation_errors": field_errors,
            },
        ),
    )

    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        error_code=ErrorCode.VALIDATION_ERROR.value,
        message="Request validation failed",
        severity=Severity.LOW,
        details={"validation_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException (unknown routes, unsupported methods).

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code, severity = ErrorCode.NOT_FOUND, Severity.LOW
    elif exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        error_code, severity = ErrorCode.INTERNAL_ERROR, Severity.HIGH
    else:
        error_code, severity = ErrorCode.HTTP_ERROR, Severity.LOW

    logger.warning(
        "HTTP exception",
        **sanitize_error_context(
            exc,
            {
                "status": exc.status_code,
                "method": request.method,
                "path": str(request.url.path),
                "detail": exc.detail,
            },
        ),
    )

    response = _error_response(
        request,
        exc.status_code,
        error_code=error_code.value,
        message=str(exc.detail),
        severity=severity,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle any exception no other handler claimed.

    The response message is opaque in every environment; development
    responses add the exception type and traceback frames.
    """
    logger.opt(exception=exc).error(
        "Unhandled exception: {}",
        type(exc).__name__,
        **sanitize_error_context(
            exc,
            {
                "request_method": request.method,
                "request_path": str(request.url.path),
            },
        ),
    )

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code=ErrorCode.INTERNAL_ERROR.value,
        message=INTERNAL_ERROR_MESSAGE,
        severity=Severity.CRITICAL,
        debug_info={
            "stack_trace": traceback.format_tb(exc.__traceback__),
            "exception_type": type(exc).__name__,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers registered")
