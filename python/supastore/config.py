"""Client settings loaded from environment variables.

Environment Configuration:
    SUPABASE_URL: Project URL, e.g. https://<project id>.supabase.co (required)
    SUPABASE_API_KEY: API key sent as both `apikey` and bearer token (required)

Logging Configuration:
    SUPASTORE_LOG_LEVEL: Root log level (default INFO)
    SUPASTORE_LOG_JSON: JSON output when true, console output when false (default true)

Values may also come from a `.env` file in the working directory.
"""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Storage client configuration.

    Both Supabase settings default to None so that a missing variable is
    reported by name from validate_required_settings rather than as a raw
    pydantic "field required" error.
    """

    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_api_key: str | None = Field(default=None, alias="SUPABASE_API_KEY")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure the URL and API key are present and non-blank."""
        missing = []
        if not self.supabase_url or not self.supabase_url.strip():
            missing.append("SUPABASE_URL")
        if not self.supabase_api_key or not self.supabase_api_key.strip():
            missing.append("SUPABASE_API_KEY")

        if missing:
            raise ValueError(f"Missing required storage settings: {', '.join(missing)}")

        return self

    @property
    def normalized_url(self) -> str:
        """Return the project URL with any trailing slash stripped."""
        return (self.supabase_url or "").strip().rstrip("/")


class LogSettings(BaseSettings):
    """Logging configuration.

    Kept apart from Settings so logging can be configured before (or without)
    the Supabase credentials being available.
    """

    log_level: str = Field(default="INFO", alias="SUPASTORE_LOG_LEVEL")
    log_json: bool = Field(default=True, alias="SUPASTORE_LOG_JSON")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached client settings.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
