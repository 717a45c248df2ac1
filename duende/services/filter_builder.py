"""Filter builder: turns flat search parameters into an ``EventFilter``.

Rules, applied in this order:

  1. The lower date bound is *today* unless ``date_from`` replaces it.
  2. ``date_to`` adds an upper bound; ``timeframe=week`` adds
     ``today + 7 days`` only when ``date_to`` is absent.
  3. ``artist`` / ``city`` / ``country`` each add one clause.
  4. ``search`` is additive: it narrows the other clauses rather than
     replacing them.  Ambiguous terms short-circuit into a
     ``ClarificationRequest`` unless the caller already picked an
     interpretation; known cities and countries become location/country
     clauses, spelled as the vocabulary spells them; everything else is a fuzzy full-text predicate.

The builder is pure: no I/O, and *today* is passed in so tests can pin it.
"""

from __future__ import annotations

from datetime import date, timedelta

import structlog

from duende.models.search import (
    DEFAULT_SEARCH_FIELDS,
    TIMEFRAME_WEEK,
    WEEK_WINDOW_DAYS,
    ClarificationRequest,
    EventFilter,
    SearchFacet,
    SearchParams,
    SearchVocabulary,
    TextSearch,
)

logger = structlog.get_logger(logger_name=__name__)


class EventFilterBuilder:
    """Builds store-agnostic event predicates.

    Parameters
    ----------
    vocabulary:
        Ambiguous terms, known cities and known countries.
    searchable_fields:
        Fields covered by the ``text`` facet.
    fuzzy_max_edits:
        Edit distance tolerated per search term.
    require_complete_listings:
        Exclude listings with placeholder name/artist/time/venue.
    """

    def __init__(
        self,
        vocabulary: SearchVocabulary,
        searchable_fields: tuple[str, ...] = DEFAULT_SEARCH_FIELDS,
        fuzzy_max_edits: int = 1,
        require_complete_listings: bool = False,
    ) -> None:
        self._vocabulary = vocabulary
        self._searchable_fields = tuple(searchable_fields)
        self._max_edits = fuzzy_max_edits
        self._require_complete = require_complete_listings

    def build(self, params: SearchParams, today: date) -> EventFilter | ClarificationRequest:
        """Return the predicate for *params*, or a clarification request."""
        date_from = (params.date_from or today).isoformat()

        date_to: str | None = None
        if params.date_to is not None:
            date_to = params.date_to.isoformat()
        elif params.timeframe == TIMEFRAME_WEEK:
            date_to = (today + timedelta(days=WEEK_WINDOW_DAYS)).isoformat()

        locations: list[str] = []
        countries: list[str] = []
        if params.city and params.city.strip():
            locations.append(params.city.strip())
        if params.country and params.country.strip():
            countries.append(params.country.strip())
        artist = params.artist.strip() if params.artist and params.artist.strip() else None

        text: TextSearch | None = None
        term = params.search.strip() if params.search else ""
        if term:
            facet = params.interpretation
            if facet is None:
                options = self._vocabulary.ambiguous_options(term)
                if options:
                    logger.info("search_term_ambiguous", term=term, options=[o.value for o in options])
                    return ClarificationRequest(term=term, candidate_interpretations=options)
                facet = self._detect_facet(term)

            # Known places go into the clause with their vocabulary spelling.
            if facet is SearchFacet.CITY:
                locations.append(self._vocabulary.match_city(term) or term)
            elif facet is SearchFacet.COUNTRY:
                countries.append(self._vocabulary.match_country(term) or term)
            elif facet is SearchFacet.ARTIST:
                text = TextSearch(query=term, fields=("artist",), max_edits=self._max_edits)
            else:
                text = TextSearch(query=term, fields=self._searchable_fields, max_edits=self._max_edits)

        return EventFilter(
            date_from=date_from,
            date_to=date_to,
            artist=artist,
            locations=tuple(locations),
            countries=tuple(countries),
            text=text,
            require_complete=self._require_complete,
        )

    def build_upcoming(self, today: date) -> EventFilter:
        """Predicate for "every listing from today onward" (used by counts)."""
        return EventFilter(date_from=today.isoformat(), require_complete=self._require_complete)

    def build_range(self, location: str, date_from: date, date_to: date) -> EventFilter:
        """Predicate for an explicit location and inclusive date range."""
        location = location.strip()
        return EventFilter(
            date_from=date_from.isoformat(),
            date_to=date_to.isoformat(),
            locations=(self._vocabulary.match_city(location) or location,),
            require_complete=self._require_complete,
        )

    def _detect_facet(self, term: str) -> SearchFacet:
        if self._vocabulary.match_city(term):
            return SearchFacet.CITY
        if self._vocabulary.match_country(term):
            return SearchFacet.COUNTRY
        return SearchFacet.TEXT
