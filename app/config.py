"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # Supabase
    supabase_url: str
    supabase_anon_key: str
    supabase_http_max_connections: int = 100
    supabase_http_max_keepalive_connections: int = 50
    supabase_postgrest_timeout_seconds: int = 30

    # OMDb
    omdb_api_key: str = ""
    omdb_base_url: str = "https://www.omdbapi.com/"
    omdb_timeout_seconds: float = 10.0
    omdb_max_concurrency: int = 4

    # App
    app_name: str = "CineCensus API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:5173"
    enable_scheduler: bool = True

    # Scheduling
    timezone: str = "UTC"
    lookup_cache_sweep_minutes: int = 60

    # Lookup cache
    poster_cache_ttl_seconds: int = 30 * 24 * 60 * 60
    query_term_ttl_seconds: int = 24 * 60 * 60
    lookup_cache_max_entries: int = 5000

    # Poster pipeline
    poster_visible_count: int = 10
    poster_max_search_terms: int = 8

    # Performance tuning
    slow_request_log_threshold_ms: int = 0
    slow_query_log_threshold_ms: int = 0

    @property
    def is_production(self) -> bool:
        """Return True when running in production."""
        return self.environment == "production"

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()  # type: ignore[call-arg]
