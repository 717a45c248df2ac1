"""Configuration module: exports Settings and the YAML/vocabulary loaders."""

from duende.config.loader import (
    get_cors_origins,
    get_search_options,
    load_config,
    load_search_vocabulary,
)
from duende.config.settings import Settings

__all__ = [
    "Settings",
    "get_cors_origins",
    "get_search_options",
    "load_config",
    "load_search_vocabulary",
]
