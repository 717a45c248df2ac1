"""Abstract base class for analytics sinks.

Search and interaction logs are fire-and-forget: a sink may be remote
(Supabase) or local (SQLite), and its failures must never fail the
request that produced the record.  Swallowing is done one level up, in
``AnalyticsService``; sinks themselves raise ``AnalyticsError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IAnalyticsProvider(ABC):
    """Contract for analytics persistence services."""

    @abstractmethod
    async def record(self, record: dict[str, Any]) -> None:
        """Persist one search/interaction record.

        Parameters
        ----------
        record:
            Flat dict with ``session_id``, ``interaction_type`` and the
            enrichment fields built by ``AnalyticsService``.  Nested
            values (``geo``, ``filters_applied``) are JSON-serialisable.

        Raises
        ------
        duende.utils.errors.AnalyticsError
            If the sink rejects or cannot store the record.
        """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables if needed.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
