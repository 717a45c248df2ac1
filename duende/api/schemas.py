"""Pydantic request/response schemas for the Duende API.

Wire names follow what the frontend already sends and reads (camelCase
for the search/night-plan contract, snake_case for the interaction log).
Python attributes are always snake_case; ``populate_by_name`` lets tests
and services build the models either way, and FastAPI serialises
responses by alias.

Write-endpoint request fields are optional at the schema level: a
missing field is a 400 with a readable ``detail`` raised by the route,
not FastAPI's generic 422.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from duende.models.search import ClarificationRequest, SearchFacet


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class EventResponse(_WireModel):
    """One event as the frontend receives it."""

    id: str = Field(alias="_id")
    name: str | None = None
    artist: str = ""
    date: str
    time: str | None = None
    venue: str | None = None
    city: str | None = None
    provincia: str | None = None
    country: str | None = None
    description: str | None = None
    source_url: str | None = Field(default=None, alias="sourceURL")
    verified: bool = False
    night_plan: str | None = Field(default=None, alias="nightPlan")


class ClarificationResponse(_WireModel):
    """Returned by ``GET /events`` when the search term is ambiguous."""

    needs_clarification: bool = Field(default=True, alias="needsClarification")
    term: str
    candidate_interpretations: list[SearchFacet] = Field(alias="candidateInterpretations")

    @classmethod
    def from_request(cls, request: ClarificationRequest) -> ClarificationResponse:
        return cls(
            needs_clarification=request.needs_clarification,
            term=request.term,
            candidate_interpretations=list(request.candidate_interpretations),
        )


class CountResponse(BaseModel):
    total: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Generative text
# ---------------------------------------------------------------------------


class NightPlanRequest(_WireModel):
    event_id: str | None = Field(default=None, alias="eventId")


class NightPlanResponse(BaseModel):
    content: str
    source: str = Field(description='"cache" or "generated"')


class EventPlanRequest(BaseModel):
    """Body of ``POST /gemini``: a full event object supplied by the client."""

    event: dict[str, Any] | None = None


class TripPlannerRequest(_WireModel):
    destination: str | None = None
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")


class TextResponse(BaseModel):
    text: str


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


class LogSearchRequest(_WireModel):
    search_term: str | None = Field(default=None, alias="searchTerm")
    filters_applied: Any = Field(default=None, alias="filtersApplied")
    results_count: int | None = Field(default=None, alias="resultsCount")
    session_id: str | None = Field(default=None, alias="sessionId")


class LogInteractionRequest(BaseModel):
    interaction_type: str | None = None
    session_id: str | None = None
    event_details: Any = None


class LogResultResponse(BaseModel):
    success: bool


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Operational
# ---------------------------------------------------------------------------


class VersionResponse(BaseModel):
    version: str
    timestamp: str


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
