"""MongoDB event store (pymongo async API).

Translates a store-agnostic ``EventFilter`` into an aggregation pipeline:

    [$search]  only when the filter carries a text predicate; Atlas requires
               it to be the first stage of the pipeline
    $match     date bounds, artist / location / country clauses, quality gate
    $sort      {date: 1}

Counts use ``count_documents`` with the same ``$match`` document (the text
predicate is not part of counts).

The collection is injected so tests can hand in a mock; ``from_settings``
builds the real ``AsyncMongoClient`` and the store then owns (and closes) it.
Every operation runs under the client-side ``timeoutMS`` configured on that
client.  Driver failures are logged with detail and re-raised as a generic
``EventStoreError``.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from bson import ObjectId
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from duende.config.settings import Settings
from duende.interfaces.event_store import IEventStore
from duende.models.event import PLACEHOLDER_VALUES, REQUIRED_LISTING_FIELDS, Event
from duende.models.search import EventFilter
from duende.utils.errors import ConfigurationError, EventStoreError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "mongodb"


def _contains(value: str) -> dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def _exact(value: str) -> dict[str, str]:
    return {"$regex": f"^{re.escape(value)}$", "$options": "i"}


def build_match(event_filter: EventFilter) -> dict[str, Any]:
    """Return the ``$match`` document for *event_filter* (text search excluded)."""
    date_clause: dict[str, str] = {"$gte": event_filter.date_from}
    if event_filter.date_to is not None:
        date_clause["$lte"] = event_filter.date_to

    match: dict[str, Any] = {"date": date_clause}
    if event_filter.artist:
        match["artist"] = _contains(event_filter.artist)

    clauses: list[dict[str, Any]] = []
    for location in event_filter.locations:
        clauses.append({"$or": [{"city": _contains(location)}, {"provincia": _contains(location)}]})
    for country in event_filter.countries:
        clauses.append({"country": _exact(country)})
    if event_filter.require_complete:
        # Inside $and so the "artist" gate never collides with the artist regex key.
        clauses.extend(
            {field: {"$nin": list(PLACEHOLDER_VALUES)}} for field in REQUIRED_LISTING_FIELDS
        )
    if clauses:
        match["$and"] = clauses
    return match


def build_pipeline(event_filter: EventFilter, search_index: str) -> list[dict[str, Any]]:
    """Return the aggregation pipeline for *event_filter*."""
    pipeline: list[dict[str, Any]] = []
    if event_filter.text is not None:
        text = event_filter.text
        text_operator: dict[str, Any] = {"query": text.query, "path": list(text.fields)}
        if text.max_edits > 0:
            text_operator["fuzzy"] = {"maxEdits": text.max_edits}
        pipeline.append({"$search": {"index": search_index, "text": text_operator}})
    pipeline.append({"$match": build_match(event_filter)})
    pipeline.append({"$sort": {"date": 1}})
    return pipeline


class MongoEventStore(IEventStore):
    """Event store backed by a MongoDB (Atlas) collection.

    Parameters
    ----------
    collection:
        An ``AsyncCollection`` (or a test double with the same async API).
    search_index:
        Name of the Atlas Search index used for text predicates.
    client:
        The owning ``AsyncMongoClient``, closed by :meth:`close`.  ``None``
        when the caller manages the client lifecycle.
    """

    def __init__(
        self,
        collection: Any,
        search_index: str = "buscador",
        client: AsyncMongoClient | None = None,
    ) -> None:
        self._collection = collection
        self._search_index = search_index
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> MongoEventStore:
        """Connect using ``MONGO_URI`` and the configured database/collection."""
        if not settings.mongo_uri:
            raise ConfigurationError(
                message="MONGO_URI is required when EVENT_STORE_BACKEND=mongo",
                provider_name=_PROVIDER_NAME,
            )
        client: AsyncMongoClient = AsyncMongoClient(
            settings.mongo_uri,
            timeoutMS=settings.store_timeout_ms,
            serverSelectionTimeoutMS=settings.store_timeout_ms,
            appname="duende-api",
        )
        collection = client[settings.mongo_db_name][settings.mongo_collection]
        return cls(collection, search_index=settings.mongo_search_index, client=client)

    # ------------------------------------------------------------------
    # IEventStore implementation
    # ------------------------------------------------------------------

    async def find_events(self, event_filter: EventFilter) -> list[Event]:
        pipeline = build_pipeline(event_filter, self._search_index)
        try:
            cursor = await self._collection.aggregate(pipeline)
            documents = await cursor.to_list(length=None)
        except PyMongoError as exc:
            logger.error("event_store_query_failed", operation="aggregate", error=str(exc))
            raise EventStoreError(provider_name=_PROVIDER_NAME) from exc

        logger.debug("event_store_query", stages=len(pipeline), matched=len(documents))
        return [Event.model_validate(doc) for doc in documents]

    async def count_events(self, event_filter: EventFilter) -> int:
        try:
            return await self._collection.count_documents(build_match(event_filter))
        except PyMongoError as exc:
            logger.error("event_store_query_failed", operation="count_documents", error=str(exc))
            raise EventStoreError(provider_name=_PROVIDER_NAME) from exc

    async def get_event(self, event_id: str) -> Event | None:
        if not ObjectId.is_valid(event_id):
            return None
        try:
            document = await self._collection.find_one({"_id": ObjectId(event_id)})
        except PyMongoError as exc:
            logger.error("event_store_query_failed", operation="find_one", error=str(exc))
            raise EventStoreError(provider_name=_PROVIDER_NAME) from exc
        return Event.model_validate(document) if document else None

    async def set_night_plan(self, event_id: str, content: str) -> None:
        if not ObjectId.is_valid(event_id):
            return
        try:
            await self._collection.update_one(
                {"_id": ObjectId(event_id)},
                {"$set": {"nightPlan": content}},
            )
        except PyMongoError as exc:
            logger.error("event_store_write_failed", operation="update_one", error=str(exc))
            raise EventStoreError(
                message="Event store write failed",
                provider_name=_PROVIDER_NAME,
            ) from exc

    async def ping(self) -> bool:
        try:
            await self._collection.database.command("ping")
            return True
        except PyMongoError as exc:
            logger.warning("event_store_ping_failed", error=str(exc))
            return False

    async def initialize(self) -> None:
        logger.info(
            "event_store_initialized",
            provider=_PROVIDER_NAME,
            collection=getattr(self._collection, "name", None),
            search_index=self._search_index,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
