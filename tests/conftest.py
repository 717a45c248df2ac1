"""Shared pytest fixtures for the Duende test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from duende.config.search_terms import default_vocabulary
from duende.interfaces.analytics_provider import IAnalyticsProvider
from duende.interfaces.llm_provider import ILLMProvider
from duende.models.event import Event
from duende.models.search import SearchVocabulary
from duende.services.filter_builder import EventFilterBuilder

# A fixed "today" keeps date-window tests independent of the wall clock.
TODAY = date(2025, 8, 1)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fixtures_dir(project_root: Path) -> Path:
    return project_root / "tests" / "fixtures"


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for complete listings; override any field by keyword."""

    def _make(**overrides: Any) -> Event:
        fields: dict[str, Any] = {
            "name": "Noche de cante",
            "artist": "Mayte Martín",
            "date": "2025-08-05",
            "time": "21:00",
            "venue": "Teatro Central",
            "city": "Sevilla",
            "provincia": "Sevilla",
            "country": "España",
            "verified": False,
        }
        fields.update(overrides)
        return Event.model_validate(fields)

    return _make


@pytest.fixture
def vocabulary() -> SearchVocabulary:
    return default_vocabulary()


@pytest.fixture
def builder(vocabulary: SearchVocabulary) -> EventFilterBuilder:
    return EventFilterBuilder(vocabulary)


# ---------------------------------------------------------------------------
# Mock provider fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider returning a canned guide.

    Override with mock_llm_provider.complete.return_value = "custom" or
    mock_llm_provider.complete.side_effect = ... for specific tests.
    """
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.validate_credentials = AsyncMock(return_value=True)
    mock.complete = AsyncMock(return_value="### Un Pellizco de Sabiduría\nOlé.")
    return mock


@pytest.fixture
def mock_analytics_provider() -> IAnalyticsProvider:
    """Mock analytics sink that accepts every record."""
    mock = MagicMock(spec=IAnalyticsProvider)
    mock.get_provider_name.return_value = "mock-analytics"
    mock.initialize = AsyncMock(return_value=None)
    mock.record = AsyncMock(return_value=None)
    return mock
