"""Event store adapters.

Two concrete implementations of IEventStore (duende/interfaces/event_store.py):
    - MongoEventStore     - MongoDB Atlas via pymongo's async client
    - InMemoryEventStore  - list-backed store for development and tests

main.py picks one from EVENT_STORE_BACKEND and stores it on app.state.
"""

from duende.providers.event_store.memory_event_store import InMemoryEventStore
from duende.providers.event_store.mongo_event_store import MongoEventStore

__all__ = ["InMemoryEventStore", "MongoEventStore"]
