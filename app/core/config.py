"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_JWKS_URL: str = ""
    SUPABASE_STORAGE_BUCKET: str = "candidate-images"

    # Google Geocoding
    GOOGLE_MAPS_API_KEY: str = ""
    GEOCODING_TIMEOUT_SECONDS: float = 10.0

    # Edit window
    APP_TIMEZONE: str = "Asia/Jerusalem"
    EDIT_WINDOW_DAYS: int = 3

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Re-edit cookies
    COOKIE_SECURE: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    def jwks_url(self) -> str:
        """Return the JWKS endpoint, derived from ``SUPABASE_URL`` when unset."""
        if self.SUPABASE_JWKS_URL:
            return self.SUPABASE_JWKS_URL
        base = self.SUPABASE_URL.rstrip("/")
        return f"{base}/auth/v1/.well-known/jwks.json"


settings = Settings()  # type: ignore[call-arg]
