"""Supabase analytics sink.

Inserts rows through Supabase's PostgREST endpoint
(``POST {SUPABASE_URL}/rest/v1/{table}``) using the shared
``httpx.AsyncClient``.  The anon key goes in both the ``apikey`` and
``Authorization`` headers, which is what PostgREST expects.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from duende.interfaces.analytics_provider import IAnalyticsProvider
from duende.utils.errors import AnalyticsError

logger = structlog.get_logger(logger_name=__name__)


class SupabaseAnalyticsProvider(IAnalyticsProvider):
    """Writes analytics records to a Supabase table."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        http_client: httpx.AsyncClient,
        table: str = "search_events",
    ) -> None:
        self._endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }
        self._http = http_client
        self._table = table

    async def record(self, record: dict[str, Any]) -> None:
        try:
            response = await self._http.post(self._endpoint, json=[record], headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AnalyticsError(
                message=f"Supabase insert rejected: HTTP {exc.response.status_code}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise AnalyticsError(
                message=f"Supabase insert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def initialize(self) -> None:
        # The table is provisioned in Supabase; nothing to create here.
        logger.info("analytics_sink_ready", provider=self.get_provider_name(), table=self._table)

    def get_provider_name(self) -> str:
        return "supabase"
