"""In-memory event store.

Evaluates an ``EventFilter`` with plain Python predicates over a list of
``Event`` models.  Semantics mirror the MongoDB translation:

  - date bounds compare ISO strings (inclusive)
  - ``artist`` / ``locations`` are case-insensitive substring matches;
    a location matches ``city`` OR ``provincia``
  - ``countries`` are case-insensitive exact matches
  - text search is fuzzy (rapidfuzz Levenshtein) over the named fields,
    ranked by number of matching terms, then re-ordered by date

Used for local development (``EVENT_STORE_BACKEND=memory``, optionally
seeded from ``EVENTS_FIXTURE_PATH``) and by the test suite.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from uuid import uuid4

import structlog

from duende.interfaces.event_store import IEventStore
from duende.models.event import Event
from duende.models.search import EventFilter
from duende.utils.text_normalizer import fuzzy_text_score

logger = structlog.get_logger(logger_name=__name__)


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


def _equals(value: str | None, expected: str) -> bool:
    return bool(value) and value.lower() == expected.lower()


class InMemoryEventStore(IEventStore):
    """List-backed event store.

    Parameters
    ----------
    events:
        Initial events.  Records without an id get a generated one.
    """

    def __init__(self, events: Iterable[Event] | None = None) -> None:
        self._events: dict[str, Event] = {}
        for event in events or []:
            self.add(event)

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryEventStore:
        """Seed a store from a JSON array of event documents."""
        with open(path, encoding="utf-8") as f:
            documents = json.load(f)
        store = cls(Event.model_validate(doc) for doc in documents)
        logger.info("memory_store_seeded", path=str(path), events=len(store._events))
        return store

    def add(self, event: Event) -> Event:
        """Insert *event*, assigning an id if it has none.  Returns the stored record."""
        if not event.id:
            event = event.model_copy(update={"id": uuid4().hex})
        self._events[event.id] = event
        return event

    # ------------------------------------------------------------------
    # IEventStore implementation
    # ------------------------------------------------------------------

    async def find_events(self, event_filter: EventFilter) -> list[Event]:
        matches = [e for e in self._events.values() if self._matches(e, event_filter)]

        if event_filter.text is not None:
            text = event_filter.text
            scored: list[tuple[int, Event]] = []
            for event in matches:
                values = [getattr(event, f, None) for f in text.fields]
                score = fuzzy_text_score(text.query, values, text.max_edits)
                if score > 0:
                    scored.append((score, event))
            # Relevance first, then the stable date sort below keeps ties in relevance order.
            scored.sort(key=lambda pair: pair[0], reverse=True)
            matches = [event for _, event in scored]

        matches.sort(key=lambda e: e.date)
        logger.debug("memory_store_find", matched=len(matches))
        return matches

    async def count_events(self, event_filter: EventFilter) -> int:
        return sum(1 for e in self._events.values() if self._matches(e, event_filter))

    async def get_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    async def set_night_plan(self, event_id: str, content: str) -> None:
        event = self._events.get(event_id)
        if event is None:
            return
        self._events[event_id] = event.model_copy(update={"night_plan": content})

    async def ping(self) -> bool:
        return True

    async def initialize(self) -> None:
        logger.info("memory_store_ready", events=len(self._events))

    async def close(self) -> None:
        return None

    def get_provider_name(self) -> str:
        return "memory"

    # ------------------------------------------------------------------
    # Predicate evaluation
    # ------------------------------------------------------------------

    @staticmethod
    def _matches(event: Event, f: EventFilter) -> bool:
        if event.date < f.date_from:
            return False
        if f.date_to is not None and event.date > f.date_to:
            return False
        if f.artist and not _contains(event.artist, f.artist):
            return False
        for location in f.locations:
            if not (_contains(event.city, location) or _contains(event.provincia, location)):
                return False
        for country in f.countries:
            if not _equals(event.country, country):
                return False
        if f.require_complete and not event.is_complete_listing():
            return False
        return True
