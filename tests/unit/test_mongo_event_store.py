"""Unit tests for MongoEventStore: pipeline translation and driver error mapping.

The collection is a MagicMock exposing the async pymongo API, so no
MongoDB server is needed.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import ExecutionTimeout, ServerSelectionTimeoutError

from duende.config.settings import Settings
from duende.models.search import EventFilter, TextSearch
from duende.providers.event_store.mongo_event_store import (
    MongoEventStore,
    build_match,
    build_pipeline,
)
from duende.utils.errors import ConfigurationError, EventStoreError

_OID = "64b7f0c2a1b2c3d4e5f60718"


def _collection(documents: list[dict] | None = None) -> MagicMock:
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=documents or [])
    collection = MagicMock()
    collection.name = "events"
    collection.aggregate = AsyncMock(return_value=cursor)
    collection.count_documents = AsyncMock(return_value=0)
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock()
    collection.database.command = AsyncMock(return_value={"ok": 1})
    return collection


# ======================================================================
# Pipeline translation
# ======================================================================


class TestBuildMatch:
    def test_date_bounds(self) -> None:
        match = build_match(EventFilter(date_from="2025-08-01", date_to="2025-08-08"))
        assert match == {"date": {"$gte": "2025-08-01", "$lte": "2025-08-08"}}

    def test_location_matches_city_or_provincia(self) -> None:
        match = build_match(EventFilter(date_from="2025-08-01", locations=("Sevilla",)))
        assert match["$and"] == [
            {
                "$or": [
                    {"city": {"$regex": "Sevilla", "$options": "i"}},
                    {"provincia": {"$regex": "Sevilla", "$options": "i"}},
                ]
            }
        ]

    def test_user_input_is_regex_escaped(self) -> None:
        match = build_match(EventFilter(date_from="2025-08-01", artist="Paco (hijo)"))
        assert match["artist"] == {"$regex": r"Paco\ \(hijo\)", "$options": "i"}

    def test_country_is_anchored(self) -> None:
        match = build_match(EventFilter(date_from="2025-08-01", countries=("Argentina",)))
        assert match["$and"] == [{"country": {"$regex": "^Argentina$", "$options": "i"}}]

    def test_quality_gate_sits_beside_artist_regex(self) -> None:
        match = build_match(
            EventFilter(date_from="2025-08-01", artist="Mayte", require_complete=True)
        )
        assert match["artist"]["$regex"] == "Mayte"
        assert {"artist": {"$nin": [None, "", "N/A"]}} in match["$and"]
        assert {"venue": {"$nin": [None, "", "N/A"]}} in match["$and"]


class TestBuildPipeline:
    def test_without_text_search(self) -> None:
        pipeline = build_pipeline(EventFilter(date_from="2025-08-01"), "buscador")
        assert pipeline == [
            {"$match": {"date": {"$gte": "2025-08-01"}}},
            {"$sort": {"date": 1}},
        ]

    def test_search_stage_comes_first(self) -> None:
        f = EventFilter(
            date_from="2025-08-01",
            text=TextSearch(query="camaron", fields=("name", "artist"), max_edits=1),
        )
        pipeline = build_pipeline(f, "buscador")
        assert pipeline[0] == {
            "$search": {
                "index": "buscador",
                "text": {
                    "query": "camaron",
                    "path": ["name", "artist"],
                    "fuzzy": {"maxEdits": 1},
                },
            }
        }
        assert list(pipeline[1]) == ["$match"]
        assert pipeline[2] == {"$sort": {"date": 1}}

    def test_exact_text_search_has_no_fuzzy_block(self) -> None:
        f = EventFilter(date_from="2025-08-01", text=TextSearch(query="x", max_edits=0))
        assert "fuzzy" not in build_pipeline(f, "idx")[0]["$search"]["text"]


# ======================================================================
# Store operations
# ======================================================================


class TestMongoEventStore:
    @pytest.mark.asyncio
    async def test_find_events_validates_documents(self) -> None:
        collection = _collection(
            [{"_id": ObjectId(_OID), "artist": "Mayte", "date": "2025-08-05", "verified": 1}]
        )
        store = MongoEventStore(collection)
        events = await store.find_events(EventFilter(date_from="2025-08-01"))

        assert len(events) == 1
        assert events[0].id == _OID
        assert events[0].verified is True
        collection.aggregate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_driver_error_becomes_event_store_error(self) -> None:
        collection = _collection()
        collection.aggregate = AsyncMock(side_effect=ExecutionTimeout("operation exceeded time limit"))
        store = MongoEventStore(collection)

        with pytest.raises(EventStoreError) as exc_info:
            await store.find_events(EventFilter(date_from="2025-08-01"))
        assert exc_info.value.message == "Event store query failed"
        assert "time limit" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_count_uses_match_document(self) -> None:
        collection = _collection()
        collection.count_documents = AsyncMock(return_value=42)
        store = MongoEventStore(collection)

        total = await store.count_events(EventFilter(date_from="2025-08-01"))
        assert total == 42
        collection.count_documents.assert_awaited_once_with({"date": {"$gte": "2025-08-01"}})

    @pytest.mark.asyncio
    async def test_invalid_object_id_is_not_found(self) -> None:
        collection = _collection()
        store = MongoEventStore(collection)
        assert await store.get_event("not-an-object-id") is None
        collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_night_plan_overwrites_field(self) -> None:
        collection = _collection()
        store = MongoEventStore(collection)
        await store.set_night_plan(_OID, "plan")
        collection.update_one.assert_awaited_once_with(
            {"_id": ObjectId(_OID)},
            {"$set": {"nightPlan": "plan"}},
        )

    @pytest.mark.asyncio
    async def test_ping_reports_unreachable_server(self) -> None:
        collection = _collection()
        collection.database.command = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        assert await MongoEventStore(collection).ping() is False

    def test_from_settings_requires_uri(self) -> None:
        with pytest.raises(ConfigurationError):
            MongoEventStore.from_settings(Settings(_env_file=None, mongo_uri=""))

    def test_from_settings_applies_store_timeout(self) -> None:
        settings = Settings(
            _env_file=None,
            mongo_uri="mongodb://db.example:27017",
            mongo_db_name="FlamencoDB",
            mongo_collection="listings",
            mongo_search_index="listings_search",
            store_timeout_ms=2500,
        )
        with patch("duende.providers.event_store.mongo_event_store.AsyncMongoClient") as client_cls:
            store = MongoEventStore.from_settings(settings)

        args, kwargs = client_cls.call_args
        assert args == ("mongodb://db.example:27017",)
        assert kwargs["timeoutMS"] == 2500
        assert kwargs["serverSelectionTimeoutMS"] == 2500
        client = client_cls.return_value
        client.__getitem__.assert_called_once_with("FlamencoDB")
        client.__getitem__.return_value.__getitem__.assert_called_once_with("listings")
        assert store._search_index == "listings_search"
        assert store._client is client

    def test_default_store_timeout_is_five_seconds(self) -> None:
        with patch("duende.providers.event_store.mongo_event_store.AsyncMongoClient") as client_cls:
            MongoEventStore.from_settings(Settings(_env_file=None, mongo_uri="mongodb://db.example"))
        assert client_cls.call_args.kwargs["timeoutMS"] == 5000
