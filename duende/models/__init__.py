"""Duende domain models: re-exports all public model classes.

    - event.py   - the ``Event`` listing and listing-quality constants
    - search.py  - search parameters, the store-agnostic ``EventFilter``,
                   clarification payloads and the search vocabulary
"""

from __future__ import annotations

from duende.models.event import PLACEHOLDER_VALUES, REQUIRED_LISTING_FIELDS, Event
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

__all__ = [
    "ClarificationRequest",
    "DEFAULT_SEARCH_FIELDS",
    "Event",
    "EventFilter",
    "PLACEHOLDER_VALUES",
    "REQUIRED_LISTING_FIELDS",
    "SearchFacet",
    "SearchParams",
    "SearchVocabulary",
    "TIMEFRAME_WEEK",
    "TextSearch",
    "WEEK_WINDOW_DAYS",
]
