"""FastAPI routes for the Duende events API.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern; main.py populates app.state
in the lifespan.

    Endpoint                 Method  Description
    ─────────────────────────────────────────────────────────────────
    /events                  GET     Search upcoming events (or ask to clarify)
    /events/count            GET     Number of events from today onward
    /generate-night-plan     POST    Cached one-evening guide for a stored event
    /gemini                  POST    One-evening guide for a client-supplied event
    /trip-planner            POST    Day-by-day itinerary for a destination
    /log-search              POST    Search analytics
    /log-interaction         POST    UI interaction analytics
    /version                 GET     Deployed API version
    /health                  GET     Health check + provider status (?verifyCredentials)

Store and LLM failures propagate as ``DuendeError`` subclasses and are
rendered by ``ErrorHandlingMiddleware``.
"""

from __future__ import annotations

import time
from datetime import date, datetime, timezone
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from duende import __version__
from duende.api.schemas import (
    ClarificationResponse,
    CountResponse,
    EventPlanRequest,
    EventResponse,
    HealthResponse,
    LogInteractionRequest,
    LogResultResponse,
    LogSearchRequest,
    MessageResponse,
    NightPlanRequest,
    NightPlanResponse,
    TextResponse,
    TripPlannerRequest,
    VersionResponse,
)
from duende.interfaces.event_store import IEventStore
from duende.interfaces.llm_provider import ILLMProvider
from duende.models.search import ClarificationRequest, SearchFacet, SearchParams
from duende.services.analytics_service import AnalyticsService, request_metadata
from duende.services.event_search_service import EventSearchService
from duende.services.night_plan_service import NightPlanService
from duende.services.trip_planner_service import TripPlannerService
from duende.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter()

_SEARCH_CACHE_CONTROL = "s-maxage=60, stale-while-revalidate"
_NO_STORE = "no-store, max-age=0"
_ANALYTICS_DISABLED = "Analytics disabled."


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_search_service(request: Request) -> EventSearchService:
    """Return the event search service from application state."""
    return request.app.state.search_service


def _get_night_plan_service(request: Request) -> NightPlanService:
    return request.app.state.night_plan_service


def _get_trip_planner(request: Request) -> TripPlannerService:
    return request.app.state.trip_planner


def _get_analytics(request: Request) -> AnalyticsService:
    return request.app.state.analytics


def _get_event_store(request: Request) -> IEventStore:
    return request.app.state.event_store


def _get_llm(request: Request) -> ILLMProvider:
    return request.app.state.llm


SearchServiceDep = Annotated[EventSearchService, Depends(_get_search_service)]
NightPlanDep = Annotated[NightPlanService, Depends(_get_night_plan_service)]
TripPlannerDep = Annotated[TripPlannerService, Depends(_get_trip_planner)]
AnalyticsDep = Annotated[AnalyticsService, Depends(_get_analytics)]
EventStoreDep = Annotated[IEventStore, Depends(_get_event_store)]
LLMDep = Annotated[ILLMProvider, Depends(_get_llm)]


def _parse_interpretation(value: str | None) -> SearchFacet | None:
    if not value:
        return None
    try:
        return SearchFacet(value.strip().lower())
    except ValueError:
        allowed = ", ".join(f.value for f in SearchFacet)
        raise HTTPException(
            status_code=400,
            detail=f"Unknown preferredOption {value!r}; expected one of: {allowed}",
        ) from None


def _parse_iso_date(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"{field} must be a YYYY-MM-DD date",
        ) from None


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@router.get(
    "/events",
    response_model=list[EventResponse] | ClarificationResponse,
    summary="Search upcoming flamenco events",
)
async def list_events(
    response: Response,
    service: SearchServiceDep,
    search: Annotated[str | None, Query()] = None,
    artist: Annotated[str | None, Query()] = None,
    city: Annotated[str | None, Query()] = None,
    country: Annotated[str | None, Query()] = None,
    date_from: Annotated[date | None, Query(alias="dateFrom")] = None,
    date_to: Annotated[date | None, Query(alias="dateTo")] = None,
    timeframe: Annotated[str | None, Query()] = None,
    preferred_option: Annotated[str | None, Query(alias="preferredOption")] = None,
) -> list[EventResponse] | ClarificationResponse:
    """Return deduplicated events ascending by date.

    An ambiguous ``search`` term without ``preferredOption`` yields a
    clarification payload instead of results.
    """
    params = SearchParams(
        search=search,
        artist=artist,
        city=city,
        country=country,
        date_from=date_from,
        date_to=date_to,
        timeframe=timeframe,
        interpretation=_parse_interpretation(preferred_option),
    )
    result = await service.search(params)

    response.headers["Cache-Control"] = _SEARCH_CACHE_CONTROL
    if isinstance(result, ClarificationRequest):
        return ClarificationResponse.from_request(result)
    return [EventResponse.model_validate(event.to_document()) for event in result]


@router.get(
    "/events/count",
    response_model=CountResponse,
    summary="Count events from today onward",
)
async def count_events(response: Response, service: SearchServiceDep) -> CountResponse:
    response.headers["Cache-Control"] = _NO_STORE
    return CountResponse(total=await service.count_upcoming())


# ---------------------------------------------------------------------------
# Generative text
# ---------------------------------------------------------------------------


@router.post(
    "/generate-night-plan",
    response_model=NightPlanResponse,
    summary="Get or generate the night plan for a stored event",
)
async def generate_night_plan(
    body: NightPlanRequest,
    response: Response,
    service: NightPlanDep,
) -> NightPlanResponse:
    """Return the cached plan, generating and caching it on first request.

    Unknown ids surface as ``EventNotFoundError`` (404 via middleware).
    """
    response.headers["Cache-Control"] = _NO_STORE
    if not body.event_id:
        raise HTTPException(status_code=400, detail="eventId is required")

    content, source = await service.get_or_create_plan(body.event_id)
    return NightPlanResponse(content=content, source=source)


@router.post(
    "/gemini",
    response_model=TextResponse,
    summary="Generate a night plan for a client-supplied event",
)
async def plan_for_event(body: EventPlanRequest, service: NightPlanDep) -> TextResponse:
    if not body.event:
        raise HTTPException(status_code=400, detail="event is required")
    return TextResponse(text=await service.plan_for_event(body.event))


@router.post(
    "/trip-planner",
    response_model=TextResponse,
    summary="Plan a multi-day flamenco trip",
)
async def plan_trip(body: TripPlannerRequest, service: TripPlannerDep) -> TextResponse:
    if not body.destination or not body.start_date or not body.end_date:
        raise HTTPException(
            status_code=400,
            detail="destination, startDate and endDate are required",
        )
    start = _parse_iso_date(body.start_date, "startDate")
    end = _parse_iso_date(body.end_date, "endDate")
    if end < start:
        raise HTTPException(status_code=400, detail="endDate must not be before startDate")

    text = await service.plan_trip(body.destination.strip(), start, end)
    return TextResponse(text=text)


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


@router.post(
    "/log-search",
    response_model=LogResultResponse | MessageResponse,
    summary="Record a search for analytics",
)
async def log_search(
    body: LogSearchRequest,
    request: Request,
    response: Response,
    analytics: AnalyticsDep,
) -> LogResultResponse | MessageResponse:
    started_at = time.perf_counter()
    if not analytics.enabled:
        return MessageResponse(message=_ANALYTICS_DISABLED)
    if not body.session_id:
        raise HTTPException(status_code=400, detail="sessionId is required")

    ok = await analytics.log_search(
        session_id=body.session_id,
        search_term=body.search_term,
        filters_applied=body.filters_applied,
        results_count=body.results_count,
        metadata=request_metadata(request.headers),
        started_at=started_at,
    )
    response.status_code = 201 if ok else 200
    return LogResultResponse(success=ok)


@router.post(
    "/log-interaction",
    response_model=LogResultResponse | MessageResponse,
    summary="Record a UI interaction for analytics",
)
async def log_interaction(
    body: LogInteractionRequest,
    request: Request,
    response: Response,
    analytics: AnalyticsDep,
) -> LogResultResponse | MessageResponse:
    started_at = time.perf_counter()
    if not analytics.enabled:
        return MessageResponse(message=_ANALYTICS_DISABLED)
    if not body.interaction_type or not body.session_id:
        raise HTTPException(
            status_code=400,
            detail="interaction_type and session_id are required",
        )

    ok = await analytics.log_interaction(
        session_id=body.session_id,
        interaction_type=body.interaction_type,
        event_details=body.event_details,
        metadata=request_metadata(request.headers),
        started_at=started_at,
    )
    response.status_code = 201 if ok else 200
    return LogResultResponse(success=ok)


# ---------------------------------------------------------------------------
# Operational
# ---------------------------------------------------------------------------


@router.get("/version", response_model=VersionResponse, summary="Deployed API version")
async def version(response: Response) -> VersionResponse:
    response.headers["Cache-Control"] = _NO_STORE
    return VersionResponse(
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(
    request: Request,
    store: EventStoreDep,
    llm: LLMDep,
    verify_credentials: Annotated[bool, Query(alias="verifyCredentials")] = False,
) -> HealthResponse:
    """Return application health, version, and provider availability.

    ``verifyCredentials=true`` also makes one lightweight call to the LLM
    API.  Without it only the event store is contacted.
    """
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    store_ok = await store.ping()
    providers["event_store_reachable"] = store_ok
    healthy = store_ok
    if verify_credentials:
        llm_ok = await llm.validate_credentials()
        providers["llm_credentials_valid"] = llm_ok
        healthy = healthy and llm_ok

    if not healthy:
        _logger.warning(
            "health_degraded",
            store=store.get_provider_name(),
            store_reachable=store_ok,
            llm=llm.get_provider_name(),
        )

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        providers=providers,
    )
