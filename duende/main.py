"""Duende FastAPI application entry point.

Wires providers, services and routes via dependency injection.  Loads
configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging at import time; every client that holds a connection
(MongoDB, the shared httpx client) is created in the lifespan, stored on
``app.state`` and closed at shutdown.

Tests pass pre-built components to :func:`create_app` (see
:func:`build_services`) so no real database or API key is needed.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import date
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from duende import __version__
from duende.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from duende.api.routes import router as api_router
from duende.config.loader import (
    get_cors_origins,
    get_search_options,
    load_config,
    load_search_vocabulary,
)
from duende.config.settings import Settings
from duende.interfaces.analytics_provider import IAnalyticsProvider
from duende.interfaces.event_store import IEventStore
from duende.interfaces.llm_provider import ILLMProvider
from duende.providers.analytics.sqlite_analytics_provider import SQLiteAnalyticsProvider
from duende.providers.analytics.supabase_provider import SupabaseAnalyticsProvider
from duende.providers.event_store.memory_event_store import InMemoryEventStore
from duende.providers.event_store.mongo_event_store import MongoEventStore
from duende.providers.llm.gemini_provider import GeminiLLMProvider
from duende.providers.llm.openai_provider import OpenAILLMProvider
from duende.services.analytics_service import AnalyticsService
from duende.services.event_search_service import EventSearchService
from duende.services.filter_builder import EventFilterBuilder
from duende.services.night_plan_service import NightPlanService
from duende.services.trip_planner_service import TripPlannerService
from duende.utils.errors import ConfigurationError
from duende.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_event_store(app_settings: Settings) -> IEventStore:
    """Return the store named by ``EVENT_STORE_BACKEND``.

    Raises:
        ConfigurationError: Unknown backend, or ``mongo`` without ``MONGO_URI``.
    """
    backend = app_settings.event_store_backend.strip().lower()
    if backend == "mongo":
        return MongoEventStore.from_settings(app_settings)
    if backend == "memory":
        if app_settings.events_fixture_path:
            return InMemoryEventStore.from_json_file(app_settings.events_fixture_path)
        return InMemoryEventStore()
    raise ConfigurationError(message=f"Unknown EVENT_STORE_BACKEND {backend!r}")


def _build_llm_provider(app_settings: Settings, http_client: httpx.AsyncClient) -> ILLMProvider:
    """Select the first available LLM provider based on configured API keys.

    Priority order: Gemini -> OpenAI.  With neither key the app refuses to start.
    """
    if app_settings.gemini_api_key:
        provider: ILLMProvider = GeminiLLMProvider(settings=app_settings, http_client=http_client)
        if provider.is_available():
            return provider

    if app_settings.openai_api_key:
        provider = OpenAILLMProvider(settings=app_settings)
        if provider.is_available():
            return provider

    raise ConfigurationError(message="Set GEMINI_API_KEY or OPENAI_API_KEY")


def _build_analytics_provider(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
) -> IAnalyticsProvider | None:
    """Supabase when configured, else local SQLite when a path is set, else disabled."""
    backend = app_settings.analytics_backend()
    if backend == "supabase":
        return SupabaseAnalyticsProvider(
            url=app_settings.supabase_url,
            anon_key=app_settings.supabase_anon_key,
            http_client=http_client,
            table=app_settings.supabase_table,
        )
    if backend == "sqlite":
        return SQLiteAnalyticsProvider(db_path=app_settings.analytics_db_path)
    _logger.warning("analytics_disabled", reason="no Supabase credentials or ANALYTICS_DB_PATH")
    return None


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def build_services(
    event_store: IEventStore,
    llm: ILLMProvider,
    analytics_provider: IAnalyticsProvider | None,
    app_config: dict,
    today_provider: Callable[[], date] = date.today,
) -> dict[str, Any]:
    """Assemble the service layer around already-built providers.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    builder = EventFilterBuilder(
        load_search_vocabulary(app_config),
        **get_search_options(app_config),
    )
    return {
        "event_store": event_store,
        "llm": llm,
        "analytics_provider": analytics_provider,
        "search_service": EventSearchService(event_store, builder, today_provider=today_provider),
        "night_plan_service": NightPlanService(event_store, llm),
        "trip_planner": TripPlannerService(event_store, builder, llm),
        "analytics": AnalyticsService(analytics_provider),
        "provider_registry": {
            "event_store": event_store.get_provider_name(),
            "llm": llm.get_provider_name(),
            "analytics": analytics_provider.get_provider_name() if analytics_provider else None,
        },
    }


def _build_all(app_settings: Settings, app_config: dict) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Raises:
        ConfigurationError: Missing store URI or AI key.  Raised before any
            connection is opened so a misconfigured app never serves traffic.
    """
    if not app_settings.get_available_llm_providers():
        raise ConfigurationError(message="Set GEMINI_API_KEY or OPENAI_API_KEY")
    event_store = _build_event_store(app_settings)

    http_client = httpx.AsyncClient(timeout=app_settings.http_timeout_seconds)
    llm = _build_llm_provider(app_settings, http_client)
    analytics_provider = _build_analytics_provider(app_settings, http_client)

    components = build_services(event_store, llm, analytics_provider, app_config)
    components["http_client"] = http_client
    return components


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = getattr(application.state, "injected_components", None)
    if not components:
        components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    event_store: IEventStore = components["event_store"]
    await event_store.initialize()
    analytics_provider: IAnalyticsProvider | None = components.get("analytics_provider")
    if analytics_provider is not None:
        await analytics_provider.initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        **components["provider_registry"],
    )

    yield

    await event_store.close()
    http_client: httpx.AsyncClient | None = components.get("http_client")
    if http_client is not None:
        await http_client.aclose()
    _logger.info("app_shutdown", message="store and HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    components: dict[str, Any] | None = None,
    app_config: dict | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    components:
        Optional pre-built DI components (see :func:`build_services`).
        When omitted, the lifespan builds them from environment settings.
    app_config:
        Resolved configuration; defaults to the module-level ``config``.
    """
    resolved_config = app_config if app_config is not None else config
    application = FastAPI(
        title="Duende API",
        version=__version__,
        description=(
            "Search upcoming flamenco performances, get an AI-written guide for "
            "a night out, and plan a multi-day flamenco trip."
        ),
        lifespan=_lifespan,
    )

    if components:
        application.state.injected_components = components

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=get_cors_origins(resolved_config))

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "duende.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
