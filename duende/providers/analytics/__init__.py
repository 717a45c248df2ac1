"""Analytics sink adapters.

Two concrete implementations of IAnalyticsProvider
(duende/interfaces/analytics_provider.py):
    - SupabaseAnalyticsProvider - PostgREST insert over httpx
    - SQLiteAnalyticsProvider   - local aiosqlite database

With neither SUPABASE_URL/SUPABASE_ANON_KEY nor ANALYTICS_DB_PATH set,
analytics are disabled and the logging routes answer "Analytics disabled".
"""

from duende.providers.analytics.sqlite_analytics_provider import SQLiteAnalyticsProvider
from duende.providers.analytics.supabase_provider import SupabaseAnalyticsProvider

__all__ = ["SQLiteAnalyticsProvider", "SupabaseAnalyticsProvider"]
