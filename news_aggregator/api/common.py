"""Request id middleware and error handlers shared by every service."""

import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from ..correlation import REQUEST_ID_HEADER, CorrelationContext
from ..errors import (
    ModerationRejected, NotFound, ReferentialError, StoreError,
    UpstreamUnavailable, ValidationError,
)

logger = structlog.get_logger()

# Checked in order, so subclasses come before their bases
ERROR_STATUS = (
    (ValidationError, 400),
    (ModerationRejected, 400),
    (ReferentialError, 400),
    (NotFound, 404),
    (UpstreamUnavailable, 502),
    (StoreError, 500),
)


def get_correlation(request: Request) -> CorrelationContext:
    """Correlation context established by the middleware for this request."""
    correlation = getattr(request.state, "correlation", None)
    if correlation is None:
        correlation = CorrelationContext.from_headers(request.headers)
        request.state.correlation = correlation
    return correlation


def error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    correlation = get_correlation(request)
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=correlation.headers(),
    )


def status_for(exc: Exception) -> int:
    for exc_type, status_code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def install_request_middleware(app: FastAPI, service: str) -> None:
    """Attach request id handling, request logging and error mapping to an app."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        correlation = CorrelationContext.from_headers(request.headers)
        request.state.correlation = correlation
        log = logger.bind(service=service)
        client = request.client.host if request.client else None

        start_time = time.time()
        log.info(
            "request_started",
            request_id=correlation.request_id,
            generated=correlation.generated,
            method=request.method,
            path=request.url.path,
            client=request.headers.get("X-Forwarded-For", client),
        )

        response = await call_next(request)

        # Handlers may have adopted an id returned by a downstream service
        response.headers[REQUEST_ID_HEADER] = correlation.request_id
        log.info(
            "request_completed",
            request_id=correlation.request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return response

    async def handle_domain_error(request: Request, exc: Exception):
        status_code = status_for(exc)
        log = logger.bind(service=service, request_id=get_correlation(request).request_id)
        if status_code >= 500:
            log.error("request_failed", error=str(exc), status=status_code)
        else:
            log.info("request_rejected", error=str(exc), status=status_code)
        return error_response(request, status_code, str(exc))

    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"Invalid request: {location} {first.get('msg', '')}".strip()
        return error_response(request, 400, message)

    for exc_type, _ in ERROR_STATUS:
        app.add_exception_handler(exc_type, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)


def parse_int_param(value, name: str) -> int:
    """Parse a required integer query parameter."""
    if value is None or value == "":
        raise ValidationError(f"Missing '{name}' parameter")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid '{name}' parameter format: must be a number") from None
