"""structlog configuration for the Duende API.

Two outputs share one processor chain: a coloured console for local work
and one JSON object per line in production (``APP_ENV=production``, passed
in by ``duende.main``).  Records from stdlib loggers (uvicorn, httpx,
pymongo) are routed through the same chain.

Per-request context lives in structlog's contextvars.
``RequestLoggingMiddleware`` calls :func:`bind_request_context` when a
request arrives, so every event logged while serving it (the search
service's ``events_search``, a store's ``event_store_query_failed``)
carries the same ``request_id``, ``method`` and ``path``.
"""

import logging
import sys
from typing import Any
from uuid import uuid4

import structlog

SERVICE_NAME = "duende-api"

# Third-party loggers that are chatty at INFO/DEBUG (connection pool
# heartbeats, one line per outbound HTTP call).
_QUIET_LOGGERS: tuple[str, ...] = ("pymongo", "httpx", "httpcore")


def _add_service(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _processor_chain(json_output: bool) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors += [
            _add_service,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.dict_tracebacks,
        ]
    else:
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
        ]
    return processors


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines instead of the development console.

    Returns:
        A logger bound to the configured pipeline.
    """
    level = logging.getLevelName(log_level.upper())
    chain = _processor_chain(json_output)
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[*chain, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    stdlib_handler = logging.StreamHandler(sys.stdout)
    stdlib_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(stdlib_handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger(service=SERVICE_NAME)


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger tagged with ``logger_name``.

    Falls back to the development configuration if nothing configured
    logging yet (e.g. a module imported outside ``duende.main``).
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


def bind_request_context(method: str, path: str, request_id: str | None = None) -> str:
    """Start a fresh per-request logging context and return its request id.

    An incoming ``X-Request-ID`` is reused so log lines can be joined with
    the edge proxy's; otherwise a short random id is generated.
    """
    request_id = request_id or uuid4().hex[:16]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, method=method, path=path)
    return request_id


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
