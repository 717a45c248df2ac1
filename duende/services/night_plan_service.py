"""Night-plan generation with a write-through cache on the event record.

The first request for an event asks the LLM for a guide and stores it in
the event's ``nightPlan`` field; later requests return the stored text.
Two concurrent first requests may both generate; the last write wins,
which is acceptable for text that is equivalent in purpose.
"""

from __future__ import annotations

from typing import Any, Literal

import structlog

from duende.interfaces.event_store import IEventStore
from duende.interfaces.llm_provider import ILLMProvider
from duende.services.prompts import NIGHT_PLAN_SYSTEM_PROMPT, night_plan_prompt
from duende.utils.errors import EventNotFoundError

logger = structlog.get_logger(logger_name=__name__)

PlanSource = Literal["cache", "generated"]


class NightPlanService:
    """Generates one-evening guides around a flamenco event."""

    def __init__(self, store: IEventStore, llm: ILLMProvider) -> None:
        self._store = store
        self._llm = llm

    async def get_or_create_plan(self, event_id: str) -> tuple[str, PlanSource]:
        """Return ``(content, source)`` for the stored event *event_id*.

        Raises
        ------
        EventNotFoundError
            If no event has that id (malformed ids included).
        """
        event = await self._store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(message=f"Event {event_id} not found")

        if event.night_plan:
            logger.info("night_plan_cache_hit", event_id=event_id, name=event.name)
            return event.night_plan, "cache"

        logger.info("night_plan_generating", event_id=event_id, name=event.name)
        content = await self._llm.complete(
            system_prompt=NIGHT_PLAN_SYSTEM_PROMPT,
            user_prompt=night_plan_prompt(event),
        )
        await self._store.set_night_plan(event_id, content)
        logger.info("night_plan_cached", event_id=event_id, chars=len(content))
        return content, "generated"

    async def plan_for_event(self, event: dict[str, Any]) -> str:
        """Stateless guide for a client-supplied event payload (nothing is cached)."""
        return await self._llm.complete(
            system_prompt=NIGHT_PLAN_SYSTEM_PROMPT,
            user_prompt=night_plan_prompt(event),
        )
