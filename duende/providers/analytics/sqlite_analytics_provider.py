"""SQLite-backed analytics sink.

Local alternative to Supabase for development and self-hosted setups.
Persists search and interaction records to ``ANALYTICS_DB_PATH`` using
``aiosqlite`` for async I/O.  Nested values (``filters_applied``, ``geo``)
are stored as JSON text.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from duende.interfaces.analytics_provider import IAnalyticsProvider
from duende.utils.errors import AnalyticsError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/analytics.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS search_events (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id          TEXT    NOT NULL,
    interaction_type    TEXT    NOT NULL,
    search_term         TEXT,
    filters_applied     TEXT,
    results_count       INTEGER,
    status              TEXT,
    processing_time_ms  REAL,
    user_agent          TEXT,
    country             TEXT,
    referrer            TEXT,
    geo                 TEXT,
    created_at          TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_search_events_session ON search_events(session_id);",
    "CREATE INDEX IF NOT EXISTS idx_search_events_type ON search_events(interaction_type);",
]

_COLUMNS = (
    "session_id",
    "interaction_type",
    "search_term",
    "filters_applied",
    "results_count",
    "status",
    "processing_time_ms",
    "user_agent",
    "country",
    "referrer",
    "geo",
)

_INSERT_SQL = (
    f"INSERT INTO search_events ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)});"
)

_JSON_COLUMNS = frozenset({"filters_applied", "geo"})


class SQLiteAnalyticsProvider(IAnalyticsProvider):
    """SQLite-backed analytics persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the search_events table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("analytics_db_initialized", path=str(self._db_path))

    async def record(self, record: dict[str, Any]) -> None:
        values = []
        for column in _COLUMNS:
            value = record.get(column)
            if column in _JSON_COLUMNS and value is not None:
                value = json.dumps(value, ensure_ascii=False)
            values.append(value)

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_INSERT_SQL, values)
                await db.commit()
        except aiosqlite.Error as exc:
            raise AnalyticsError(
                message=f"SQLite insert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_provider_name(self) -> str:
        return "sqlite_analytics"
