"""API middleware: CORS, request logging and error handling.

Starlette middleware is a stack (last added, first executed).  main.py
adds ``ErrorHandlingMiddleware`` first and ``RequestLoggingMiddleware``
second, so the request log always sees the final status code, including
the ones produced by the error handler.  It also binds the request id,
method and path into the structlog context, so every line logged while
the request is served can be correlated.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from duende.api.schemas import ErrorResponse
from duende.utils.errors import DuendeError, EventNotFoundError, EventStoreError
from duende.utils.logging import bind_request_context, clear_request_context, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_GENERIC_DETAIL = "Internal server error"
REQUEST_ID_HEADER = "X-Request-ID"


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware limited to the frontend's methods and headers.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit allow-list.  Defaults to ``["*"]`` for development.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials cannot be combined with a wildcard origin.
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=[REQUEST_ID_HEADER],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a per-request log context and log one ``http_request`` line.

    The request id (taken from ``X-Request-ID`` or generated) is echoed in
    the response header of the same name.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = bind_request_context(
            method=request.method,
            path=request.url.path,
            request_id=request.headers.get(REQUEST_ID_HEADER),
        )
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _logger.info(
                "http_request",
                status=response.status_code if response else 500,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            clear_request_context()


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert ``DuendeError`` subclasses into JSON :class:`ErrorResponse` bodies.

    ``EventNotFoundError`` becomes a 404; everything else is a 500.  Store
    failures get a generic detail so driver messages (hostnames, query
    fragments) stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except DuendeError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
            )
            status_code = 404 if isinstance(exc, EventNotFoundError) else 500
            detail = _GENERIC_DETAIL if isinstance(exc, EventStoreError) else exc.message
            body = ErrorResponse(error=type(exc).__name__, detail=detail)
            return JSONResponse(status_code=status_code, content=body.model_dump())
