"""Multi-day flamenco itinerary for a destination and date range."""

from __future__ import annotations

from datetime import date

import structlog

from duende.interfaces.event_store import IEventStore
from duende.interfaces.llm_provider import ILLMProvider
from duende.services.filter_builder import EventFilterBuilder
from duende.services.prompts import (
    NO_EVENTS_MESSAGE,
    TRIP_PLANNER_SYSTEM_PROMPT,
    trip_planner_prompt,
)
from duende.services.reconciler import reconcile_events

logger = structlog.get_logger(logger_name=__name__)


class TripPlannerService:
    """Builds a day-by-day plan around the events found at the destination.

    Events are matched on ``city`` or ``provincia`` within the inclusive
    date range and reconciled before they reach the prompt, so duplicate
    postings never show up twice in the itinerary.
    """

    def __init__(self, store: IEventStore, builder: EventFilterBuilder, llm: ILLMProvider) -> None:
        self._store = store
        self._builder = builder
        self._llm = llm

    async def plan_trip(self, destination: str, start_date: date, end_date: date) -> str:
        event_filter = self._builder.build_range(destination, start_date, end_date)
        events = reconcile_events(await self._store.find_events(event_filter))

        if not events:
            logger.info("trip_planner_no_events", destination=destination)
            return NO_EVENTS_MESSAGE

        logger.info("trip_planner_generating", destination=destination, events=len(events))
        return await self._llm.complete(
            system_prompt=TRIP_PLANNER_SYSTEM_PROMPT,
            user_prompt=trip_planner_prompt(
                destination,
                start_date.isoformat(),
                end_date.isoformat(),
                events,
            ),
        )
