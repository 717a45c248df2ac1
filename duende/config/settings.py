"""Application settings loaded from environment variables via pydantic-settings.

Configuration is read from TWO sources (in priority order):

  1. **Environment variables** - e.g. ``MONGO_URI=mongodb+srv://...``
  2. **.env file** - key=value lines in the project root ``.env`` file

Field ``mongo_uri`` maps to env var ``MONGO_URI`` and so on.  Empty
strings mean "not configured"; ``duende.main`` decides which missing
values are fatal at startup.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Duende application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Event store ===
    # "mongo" (production) or "memory" (local development / demos).
    event_store_backend: str = "mongo"
    mongo_uri: str = ""
    mongo_db_name: str = "DuendeDB"
    mongo_collection: str = "events"
    mongo_search_index: str = "buscador"  # Atlas Search index over the searchable fields
    store_timeout_ms: int = 5000
    events_fixture_path: str = ""  # JSON seed file for the in-memory store

    # === Generative text ===
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash-latest"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (TogetherAI, Groq, ...)
    openai_text_model: str = ""

    # === Analytics ===
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_table: str = "search_events"
    analytics_db_path: str = ""  # local SQLite sink when Supabase is not configured

    # === HTTP ===
    cors_origins: str = ""  # comma-separated; overrides config.yaml when set
    http_timeout_seconds: float = 30.0

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names that have non-empty API keys, in priority order."""
        providers: list[str] = []
        if self.gemini_api_key:
            providers.append("gemini")
        if self.openai_api_key:
            providers.append("openai")
        return providers

    def get_cors_origins(self) -> list[str]:
        """Parse ``cors_origins`` into a list (empty when unset)."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def analytics_backend(self) -> str | None:
        """Return ``"supabase"``, ``"sqlite"`` or ``None`` (analytics disabled)."""
        if self.supabase_url and self.supabase_anon_key:
            return "supabase"
        if self.analytics_db_path:
            return "sqlite"
        return None
