"""Unit tests for factory functions in duende/main.py.

Covers store, LLM and analytics provider selection plus the fail-fast
configuration checks, all without network access.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest
from fastapi import FastAPI

from duende.config.settings import Settings
from duende.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    """Build a Settings instance with safe defaults and optional overrides."""
    defaults = {
        "event_store_backend": "memory",
        "mongo_uri": "",
        "gemini_api_key": "",
        "openai_api_key": "",
        "openai_base_url": "",
        "supabase_url": "",
        "supabase_anon_key": "",
        "analytics_db_path": "",
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


class TestBuildLLMProvider:
    def test_gemini_priority(self) -> None:
        from duende.main import _build_llm_provider
        from duende.providers.llm.gemini_provider import GeminiLLMProvider

        s = _settings(gemini_api_key="g", openai_api_key="o")
        assert isinstance(_build_llm_provider(s, MagicMock(spec=httpx.AsyncClient)), GeminiLLMProvider)

    def test_openai_fallback(self) -> None:
        from duende.main import _build_llm_provider
        from duende.providers.llm.openai_provider import OpenAILLMProvider

        s = _settings(openai_api_key="sk-test")
        assert isinstance(_build_llm_provider(s, MagicMock(spec=httpx.AsyncClient)), OpenAILLMProvider)

    def test_blank_gemini_key_falls_through_to_openai(self) -> None:
        from duende.main import _build_llm_provider
        from duende.providers.llm.openai_provider import OpenAILLMProvider

        s = _settings(gemini_api_key="   ", openai_api_key="sk-test")
        assert isinstance(_build_llm_provider(s, MagicMock(spec=httpx.AsyncClient)), OpenAILLMProvider)

    def test_no_key_is_fatal(self) -> None:
        from duende.main import _build_llm_provider

        with pytest.raises(ConfigurationError):
            _build_llm_provider(_settings(), MagicMock(spec=httpx.AsyncClient))


class TestBuildEventStore:
    def test_memory_backend(self) -> None:
        from duende.main import _build_event_store
        from duende.providers.event_store.memory_event_store import InMemoryEventStore

        assert isinstance(_build_event_store(_settings()), InMemoryEventStore)

    def test_memory_backend_seeds_fixture(self, fixtures_dir) -> None:
        from duende.main import _build_event_store

        store = _build_event_store(_settings(events_fixture_path=str(fixtures_dir / "events.json")))
        assert len(store._events) == 3

    def test_mongo_without_uri_is_fatal(self) -> None:
        from duende.main import _build_event_store

        with pytest.raises(ConfigurationError, match="MONGO_URI"):
            _build_event_store(_settings(event_store_backend="mongo"))

    def test_unknown_backend_is_fatal(self) -> None:
        from duende.main import _build_event_store

        with pytest.raises(ConfigurationError):
            _build_event_store(_settings(event_store_backend="redis"))


class TestBuildAnalyticsProvider:
    def test_supabase_preferred(self) -> None:
        from duende.main import _build_analytics_provider
        from duende.providers.analytics.supabase_provider import SupabaseAnalyticsProvider

        s = _settings(supabase_url="https://p.supabase.co", supabase_anon_key="k", analytics_db_path="x.db")
        provider = _build_analytics_provider(s, MagicMock(spec=httpx.AsyncClient))
        assert isinstance(provider, SupabaseAnalyticsProvider)

    def test_sqlite_when_path_set(self) -> None:
        from duende.main import _build_analytics_provider
        from duende.providers.analytics.sqlite_analytics_provider import SQLiteAnalyticsProvider

        provider = _build_analytics_provider(_settings(analytics_db_path="x.db"), MagicMock(spec=httpx.AsyncClient))
        assert isinstance(provider, SQLiteAnalyticsProvider)

    def test_disabled_by_default(self) -> None:
        from duende.main import _build_analytics_provider

        assert _build_analytics_provider(_settings(), MagicMock(spec=httpx.AsyncClient)) is None


class TestBuildAll:
    def test_missing_ai_key_fails_before_connecting(self) -> None:
        from duende.main import _build_all

        with pytest.raises(ConfigurationError):
            _build_all(_settings(event_store_backend="mongo", mongo_uri="mongodb://x"), {})

    def test_builds_every_component(self) -> None:
        from duende.main import _build_all

        components = _build_all(_settings(gemini_api_key="g"), {})
        assert {
            "event_store",
            "llm",
            "search_service",
            "night_plan_service",
            "trip_planner",
            "analytics",
            "http_client",
            "provider_registry",
        } <= set(components)
        assert components["provider_registry"] == {
            "event_store": "memory",
            "llm": "gemini",
            "analytics": None,
        }


class TestCreateApp:
    def test_returns_fastapi_with_routes(self) -> None:
        from duende.main import create_app

        app = create_app(app_config={})
        assert isinstance(app, FastAPI)
        paths = {route.path for route in app.routes}
        assert {"/events", "/events/count", "/generate-night-plan", "/health"} <= paths

    def test_missing_configuration_stops_startup(self, monkeypatch) -> None:
        from fastapi.testclient import TestClient

        import duende.main as main_module

        monkeypatch.setattr(main_module, "settings", _settings(event_store_backend="mongo"))
        with pytest.raises(ConfigurationError):
            with TestClient(main_module.create_app(app_config={})):
                pass
