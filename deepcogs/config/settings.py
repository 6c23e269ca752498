"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. Environment variables, e.g. ``DISCOGS_CONSUMER_KEY=...``
  2. A ``.env`` file in the working directory (local development)
  3. The defaults declared below

Field ``lastfm_api_key`` maps to env var ``LASTFM_API_KEY`` and so on;
pydantic-settings matches names case-insensitively.

An empty string means "not configured": the wiring in ``main.py`` skips
Last.fm entirely when ``lastfm_api_key`` is empty, and the recommendation
engine then relies on its style-search fallback.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """DeepCogs application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Discogs ===
    discogs_consumer_key: str = ""
    discogs_consumer_secret: str = ""
    # Personal access token, used when no OAuth session cookie is present.
    discogs_user_token: str = ""
    discogs_user_agent: str = "DeepCogs/1.0"

    # === Last.fm (similar-artist lookup) ===
    lastfm_api_key: str = ""
    lastfm_base_url: str = "https://ws.audioscrobbler.com/2.0/"

    # === Collection cache ===
    collection_cache_ttl: int = 3600
    collection_cache_max_size: int = 256

    # === Recommendations ===
    # Upper bound on a whole recommendation run; styles finished before the
    # deadline are still returned.
    recommendation_timeout: float = 90.0

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"

    def has_discogs_credentials(self) -> bool:
        """Return ``True`` if either app keys or a personal token are set."""
        return bool(
            (self.discogs_consumer_key and self.discogs_consumer_secret)
            or self.discogs_user_token
        )

    def get_cors_origins(self) -> list[str]:
        """Split the comma-separated ``CORS_ORIGINS`` value."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
