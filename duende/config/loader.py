"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  - Static defaults checked into the repo
                           (search vocabulary, CORS allow-list, quality gate)
  2. .env file           - Local developer overrides (not committed)
  3. Environment vars    - Set at deploy time

``load_config()`` reads the YAML file first, then deep-merges the
env-based values on top.  ``load_search_vocabulary()`` turns the
``search`` section into the injectable ``SearchVocabulary`` used by the
filter builder.
"""

from pathlib import Path
from typing import Any

import yaml

from duende.config.search_terms import AMBIGUOUS_TERMS, CITIES_AND_PROVINCES, COUNTRIES
from duende.config.settings import Settings
from duende.models.search import DEFAULT_SEARCH_FIELDS, SearchFacet, SearchVocabulary
from duende.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is not
              an error; built-in defaults apply.
        settings: Settings instance to merge; a fresh one is built if omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    s = settings or Settings()
    env_overrides: dict[str, Any] = {
        "app": {
            "host": s.app_host,
            "port": s.app_port,
            "env": s.app_env,
        },
        "store": {
            "backend": s.event_store_backend,
            "db_name": s.mongo_db_name,
            "collection": s.mongo_collection,
            "search_index": s.mongo_search_index,
            "timeout_ms": s.store_timeout_ms,
        },
        "llm": {
            "available_providers": s.get_available_llm_providers(),
        },
        "analytics": {
            "backend": s.analytics_backend(),
        },
        "logging": {
            "level": s.log_level,
        },
    }
    # Only override the YAML allow-list when the env var is actually set.
    if s.get_cors_origins():
        env_overrides["cors"] = {"allowed_origins": s.get_cors_origins()}

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def load_search_vocabulary(config: dict) -> SearchVocabulary:
    """Build the search vocabulary from the ``search`` config section.

    Keys not present in the YAML fall back to ``duende.config.search_terms``.

    Raises:
        ConfigurationError: If an ambiguous term lists an unknown facet.
    """
    search_cfg = config.get("search") or {}

    raw_terms = search_cfg.get("ambiguous_terms")
    if raw_terms is None:
        ambiguous: dict[str, tuple[SearchFacet, ...]] = dict(AMBIGUOUS_TERMS)
    else:
        ambiguous = {}
        for term, facets in raw_terms.items():
            try:
                ambiguous[str(term)] = tuple(SearchFacet(f) for f in facets)
            except ValueError as exc:
                raise ConfigurationError(
                    message=f"Unknown facet in search.ambiguous_terms[{term!r}]: {facets}",
                ) from exc

    return SearchVocabulary(
        ambiguous_terms=ambiguous,
        cities=tuple(search_cfg.get("cities") or CITIES_AND_PROVINCES),
        countries=tuple(search_cfg.get("countries") or COUNTRIES),
    )


def get_search_options(config: dict) -> dict[str, Any]:
    """Return filter-builder tuning knobs with defaults applied."""
    search_cfg = config.get("search") or {}
    return {
        "require_complete_listings": bool(search_cfg.get("require_complete_listings", False)),
        "fuzzy_max_edits": int(search_cfg.get("fuzzy_max_edits", 1)),
        "searchable_fields": tuple(search_cfg.get("searchable_fields") or DEFAULT_SEARCH_FIELDS),
    }


def get_cors_origins(config: dict) -> list[str]:
    """Return the CORS allow-list; ``["*"]`` when nothing is configured."""
    return list((config.get("cors") or {}).get("allowed_origins") or ["*"])


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
