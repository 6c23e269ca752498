"""API middleware — CORS, request logging, and error handling.

Starlette middleware is a stack (last added, first executed).  In
``main.py`` ErrorHandlingMiddleware is added before RequestLoggingMiddleware,
so the request flows

    Client → RequestLogging → ErrorHandling → route handler

and RequestLoggingMiddleware logs the final status code, including the
ones ErrorHandlingMiddleware produced from a ``DeepCogsError``.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from deepcogs.api.schemas import ErrorResponse
from deepcogs.utils.errors import (
    AuthenticationError,
    ComparisonDataUnavailableError,
    ConfigurationError,
    DeepCogsError,
    InvalidRequestError,
    ProviderUnavailableError,
    RateLimitError,
)
from deepcogs.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# First matching class wins, so subclasses must precede their bases.
_STATUS_BY_ERROR: tuple[tuple[type[DeepCogsError], int], ...] = (
    (InvalidRequestError, 400),
    (AuthenticationError, 401),
    (ComparisonDataUnavailableError, 404),
    (RateLimitError, 429),
    (ProviderUnavailableError, 502),
    (ConfigurationError, 503),
)


def status_for(exc: DeepCogsError) -> int:
    """Return the HTTP status code for a DeepCogs error."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Credentials are allowed because the Discogs session travels in
    cookies.  Defaults to ``["*"]``; restrict it in production.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert ``DeepCogsError`` subclasses into structured JSON errors.

    The client sees the error class name and its message; provider details
    and stack traces stay in the server log.  Other exceptions fall through
    to FastAPI's default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except DeepCogsError as exc:
            status = status_for(exc)
            log = _logger.warning if status < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status,
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=status, content=body.model_dump())
