"""Abstract base class for event document stores.

Defines the contract for reading flamenco event listings and writing the
lazily generated ``nightPlan`` field.  Implementations translate the
store-agnostic :class:`~duende.models.search.EventFilter` into their own
query language (a MongoDB aggregation pipeline, a Python predicate, ...),
so the filter builder never knows which backend it is talking to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from duende.models.event import Event
from duende.models.search import EventFilter


# Concrete implementations: MongoEventStore, InMemoryEventStore
# Located in: duende/providers/event_store/
class IEventStore(ABC):
    """Contract for event persistence backends.

    All operations are async.  Implementations must bound every outbound
    call with a timeout and raise :class:`~duende.utils.errors.EventStoreError`
    on failure rather than leaking driver exceptions.
    """

    @abstractmethod
    async def find_events(self, event_filter: EventFilter) -> list[Event]:
        """Return every event matching *event_filter*, ascending by date.

        Duplicates are **not** collapsed here; that is the reconciler's job.

        Raises
        ------
        duende.utils.errors.EventStoreError
            If the query fails or times out.
        """

    @abstractmethod
    async def count_events(self, event_filter: EventFilter) -> int:
        """Return the number of events matching *event_filter*.

        The text-search part of the filter is ignored; counts only use the
        date, location, artist, country and quality clauses.
        """

    @abstractmethod
    async def get_event(self, event_id: str) -> Event | None:
        """Return the event with *event_id*, or ``None`` if it does not exist.

        Malformed ids resolve to ``None`` rather than raising.
        """

    @abstractmethod
    async def set_night_plan(self, event_id: str, content: str) -> None:
        """Cache generated night-plan text on the event (last write wins)."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return ``True`` if the backend answers a lightweight round-trip."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend.  Called once from the application lifespan."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections.  Called once at shutdown."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
