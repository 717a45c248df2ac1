"""Search and interaction analytics.

Builds one flat record per logged action, enriches it with request
metadata (user agent, referrer and the geo headers the edge platform
injects) and hands it to the configured sink.  Analytics never fail the
caller: sink errors are logged and reported as ``False``.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

import structlog

from duende.interfaces.analytics_provider import IAnalyticsProvider

logger = structlog.get_logger(logger_name=__name__)

INTERACTION_SEARCH = "search"


def request_metadata(headers: Mapping[str, str]) -> dict[str, Any]:
    """Extract the enrichment fields from HTTP request headers."""
    return {
        "user_agent": headers.get("user-agent"),
        "country": headers.get("x-vercel-ip-country") or None,
        "referrer": headers.get("referer") or None,
        "geo": {
            "city": headers.get("x-vercel-ip-city") or None,
            "region": headers.get("x-vercel-ip-country-region") or None,
        },
    }


class AnalyticsService:
    """Fire-and-forget analytics front-end.

    Parameters
    ----------
    provider:
        The sink, or ``None`` when analytics are disabled.
    """

    def __init__(self, provider: IAnalyticsProvider | None) -> None:
        self._provider = provider

    @property
    def enabled(self) -> bool:
        return self._provider is not None

    async def log_search(
        self,
        session_id: str,
        search_term: str | None,
        filters_applied: Any,
        results_count: int | None,
        metadata: Mapping[str, Any],
        started_at: float,
    ) -> bool:
        """Record a search.  Returns ``True`` if the sink accepted it."""
        record = {
            "session_id": session_id,
            "interaction_type": INTERACTION_SEARCH,
            "search_term": search_term,
            "filters_applied": filters_applied,
            "results_count": results_count,
        }
        return await self._send(record, metadata, started_at)

    async def log_interaction(
        self,
        session_id: str,
        interaction_type: str,
        event_details: Any,
        metadata: Mapping[str, Any],
        started_at: float,
    ) -> bool:
        """Record a UI interaction (night-plan opened, event shared, ...)."""
        record = {
            "session_id": session_id,
            "interaction_type": interaction_type,
            "filters_applied": event_details,
        }
        return await self._send(record, metadata, started_at)

    async def _send(
        self,
        record: dict[str, Any],
        metadata: Mapping[str, Any],
        started_at: float,
    ) -> bool:
        if self._provider is None:
            return False

        record = {
            **record,
            "status": "success",
            "processing_time_ms": round((time.perf_counter() - started_at) * 1000, 2),
            **metadata,
        }
        try:
            await self._provider.record(record)
        except Exception as exc:
            logger.warning(
                "analytics_record_failed",
                provider=self._provider.get_provider_name(),
                interaction_type=record.get("interaction_type"),
                error=str(exc),
            )
            return False

        logger.debug(
            "analytics_recorded",
            provider=self._provider.get_provider_name(),
            interaction_type=record.get("interaction_type"),
        )
        return True
