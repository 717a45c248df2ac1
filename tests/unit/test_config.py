"""Unit tests for Settings and the YAML configuration loader."""

from __future__ import annotations

import pytest

from duende.config.loader import (
    get_cors_origins,
    get_search_options,
    load_config,
    load_search_vocabulary,
)
from duende.config.settings import Settings
from duende.models.search import DEFAULT_SEARCH_FIELDS, SearchFacet, SearchVocabulary
from duende.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_llm_priority_order(self) -> None:
        s = _settings(gemini_api_key="g", openai_api_key="o")
        assert s.get_available_llm_providers() == ["gemini", "openai"]

    def test_cors_origins_are_split(self) -> None:
        s = _settings(cors_origins=" https://a.es , ,https://b.es")
        assert s.get_cors_origins() == ["https://a.es", "https://b.es"]

    def test_analytics_backend_selection(self) -> None:
        assert _settings(supabase_url="u", supabase_anon_key="k").analytics_backend() == "supabase"
        assert _settings(supabase_url="u", analytics_db_path="a.db").analytics_backend() == "sqlite"
        assert _settings().analytics_backend() is None


class TestLoadConfig:
    def test_repo_config_enables_quality_gate(self, project_root) -> None:
        config = load_config(str(project_root / "config" / "config.yaml"), settings=_settings())
        assert get_search_options(config)["require_complete_listings"] is True
        assert "https://buscador.afland.es" in get_cors_origins(config)

    def test_missing_file_uses_defaults(self, tmp_path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=_settings())
        assert get_search_options(config) == {
            "require_complete_listings": False,
            "fuzzy_max_edits": 1,
            "searchable_fields": DEFAULT_SEARCH_FIELDS,
        }
        assert get_cors_origins(config) == ["*"]
        assert config["store"]["backend"] == "mongo"

    def test_env_cors_overrides_yaml(self, project_root) -> None:
        config = load_config(
            str(project_root / "config" / "config.yaml"),
            settings=_settings(cors_origins="https://only.es"),
        )
        assert get_cors_origins(config) == ["https://only.es"]


class TestSearchVocabulary:
    def test_yaml_vocabulary(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "search:\n"
            "  ambiguous_terms:\n"
            "    Morente: [artist, text]\n"
            "  cities: [Lisboa]\n"
            "  countries: [Portugal]\n",
            encoding="utf-8",
        )
        vocab = load_search_vocabulary(load_config(str(path), settings=_settings()))
        assert vocab.ambiguous_options("morente") == (SearchFacet.ARTIST, SearchFacet.TEXT)
        assert vocab.match_city("lisboa") == "Lisboa"
        assert vocab.match_country("PORTUGAL") == "Portugal"
        assert vocab.match_city("Sevilla") is None

    def test_ambiguous_keys_are_folded_on_validation(self) -> None:
        vocab = SearchVocabulary(ambiguous_terms={" Granaíno ": ["city", "artist"]})
        assert vocab.ambiguous_terms == {"granaino": (SearchFacet.CITY, SearchFacet.ARTIST)}

    def test_falls_back_to_builtin_terms(self) -> None:
        vocab = load_search_vocabulary({})
        assert vocab.ambiguous_options("Argentina") == (SearchFacet.COUNTRY, SearchFacet.ARTIST)
        assert vocab.match_city("Cadiz") == "Cádiz"

    def test_unknown_facet_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            load_search_vocabulary({"search": {"ambiguous_terms": {"x": ["planet"]}}})
