"""Search request, filter and clarification models.

``SearchParams`` is what the caller asks for, ``EventFilter`` is the
store-agnostic predicate the filter builder produces from it, and
``ClarificationRequest`` is returned instead of a filter when the search
term is ambiguous.  Both event stores translate the same ``EventFilter``:
MongoDB into an aggregation pipeline, the in-memory store into Python
predicates.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from duende.utils.text_normalizer import find_matching_term, fold_text

TIMEFRAME_WEEK = "week"
WEEK_WINDOW_DAYS = 7

DEFAULT_SEARCH_FIELDS: tuple[str, ...] = (
    "name",
    "artist",
    "description",
    "city",
    "provincia",
    "venue",
)


class SearchFacet(str, Enum):
    """How a free-text search term is interpreted."""

    CITY = "city"
    COUNTRY = "country"
    ARTIST = "artist"
    TEXT = "text"


class SearchParams(BaseModel):
    """Optional, independent search parameters (combined conjunctively)."""

    model_config = ConfigDict(frozen=True)

    search: str | None = None
    artist: str | None = None
    city: str | None = None
    country: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    timeframe: str | None = None
    interpretation: SearchFacet | None = Field(
        default=None,
        description="Explicit facet chosen after a clarification round-trip.",
    )


class TextSearch(BaseModel):
    """Relevance-ranked fuzzy full-text predicate."""

    model_config = ConfigDict(frozen=True)

    query: str
    fields: tuple[str, ...] = DEFAULT_SEARCH_FIELDS
    max_edits: int = Field(default=1, ge=0, le=2)


class EventFilter(BaseModel):
    """Structured predicate over the event collection.

    ``locations`` and ``countries`` hold one entry per clause; every clause
    must match (a ``city`` parameter and a city-facet search term give two
    location clauses).  Date bounds are inclusive ISO strings.
    """

    model_config = ConfigDict(frozen=True)

    date_from: str
    date_to: str | None = None
    artist: str | None = None
    locations: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()
    text: TextSearch | None = None
    require_complete: bool = False


class ClarificationRequest(BaseModel):
    """Returned instead of results when a search term has several meanings."""

    model_config = ConfigDict(frozen=True)

    needs_clarification: bool = True
    term: str
    candidate_interpretations: tuple[SearchFacet, ...]


class SearchVocabulary(BaseModel):
    """Injectable lookup tables used to interpret free-text search terms.

    ``ambiguous_terms`` keys are folded on construction so lookups are
    case- and accent-insensitive.
    """

    model_config = ConfigDict(frozen=True)

    ambiguous_terms: dict[str, tuple[SearchFacet, ...]] = Field(default_factory=dict)
    cities: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()

    @field_validator("ambiguous_terms")
    @classmethod
    def _fold_ambiguous_terms(
        cls, value: dict[str, tuple[SearchFacet, ...]]
    ) -> dict[str, tuple[SearchFacet, ...]]:
        return {fold_text(k): tuple(v) for k, v in value.items()}

    def ambiguous_options(self, term: str) -> tuple[SearchFacet, ...] | None:
        """Return the candidate facets for *term*, or ``None`` if unambiguous."""
        return self.ambiguous_terms.get(fold_text(term))

    def match_city(self, term: str) -> str | None:
        """Return the vocabulary spelling of *term* if it names a known city."""
        return find_matching_term(term, list(self.cities))

    def match_country(self, term: str) -> str | None:
        """Return the vocabulary spelling of *term* if it names a known country."""
        return find_matching_term(term, list(self.countries))
