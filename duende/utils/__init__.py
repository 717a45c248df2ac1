"""Utility modules for Duende.

- **errors** -- Domain exception hierarchy rooted at DuendeError.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- Accent folding and fuzzy token matching for
  search terms and event fields.
"""

from duende.utils.errors import (
    AnalyticsError,
    ConfigurationError,
    DuendeError,
    EventNotFoundError,
    EventStoreError,
    LLMError,
)
from duende.utils.logging import configure_logging, get_logger
from duende.utils.text_normalizer import find_matching_term, fold_text, fuzzy_text_score, tokenize

__all__ = [
    "AnalyticsError",
    "ConfigurationError",
    "DuendeError",
    "EventNotFoundError",
    "EventStoreError",
    "LLMError",
    "configure_logging",
    "find_matching_term",
    "fold_text",
    "fuzzy_text_score",
    "get_logger",
    "tokenize",
]
