"""Public interface definitions for all external collaborators.

Every external service in Duende is accessed through the abstract base
classes defined in this package.  Concrete adapters implement them and are
injected at startup by ``duende.main``, so tests can swap in fakes.

    Interface            →  Concrete implementations (in duende/providers/)
    ─────────────────────────────────────────────────────────────────────
    IEventStore          →  MongoEventStore, InMemoryEventStore
    ILLMProvider         →  GeminiLLMProvider, OpenAILLMProvider
    IAnalyticsProvider   →  SupabaseAnalyticsProvider, SQLiteAnalyticsProvider
"""

from duende.interfaces.analytics_provider import IAnalyticsProvider
from duende.interfaces.event_store import IEventStore
from duende.interfaces.llm_provider import ILLMProvider

__all__ = [
    "IAnalyticsProvider",
    "IEventStore",
    "ILLMProvider",
]
