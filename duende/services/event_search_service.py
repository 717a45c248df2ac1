"""Event search service: filter builder, then store, then reconciler."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

import structlog

from duende.interfaces.event_store import IEventStore
from duende.models.event import Event
from duende.models.search import ClarificationRequest, SearchParams
from duende.services.filter_builder import EventFilterBuilder
from duende.services.reconciler import reconcile_events

logger = structlog.get_logger(logger_name=__name__)


class EventSearchService:
    """Answers event searches and upcoming-event counts.

    Parameters
    ----------
    store:
        Event store the filter is executed against.
    builder:
        Filter builder holding the search vocabulary and quality gate.
    today_provider:
        Clock used for the "today onward" default.  Injected so tests can pin it.
    """

    def __init__(
        self,
        store: IEventStore,
        builder: EventFilterBuilder,
        today_provider: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._builder = builder
        self._today = today_provider

    async def search(self, params: SearchParams) -> list[Event] | ClarificationRequest:
        """Return reconciled events for *params*, or a clarification request."""
        result = self._builder.build(params, self._today())
        if isinstance(result, ClarificationRequest):
            return result

        raw = await self._store.find_events(result)
        events = reconcile_events(raw)
        logger.info(
            "events_search",
            search=params.search,
            fetched=len(raw),
            returned=len(events),
            store=self._store.get_provider_name(),
        )
        return events

    async def count_upcoming(self) -> int:
        """Number of stored events dated today or later (duplicates included)."""
        total = await self._store.count_events(self._builder.build_upcoming(self._today()))
        logger.debug("events_count", total=total)
        return total
