"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Empty credentials mean the corresponding upstream is unconfigured; the
    component that needs it returns no result instead of calling out.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # AI services
    gemini_api_key: str = ""
    xai_api_key: str = ""
    elevenlabs_api_key: str = ""

    # Code hosting
    github_token: str = ""

    # Item store (Notion)
    notion_api_key: str = ""
    notion_database_id: str = ""

    # Notifications (Slack)
    slack_bot_token: str = ""

    # Inbound auth
    api_secret_key: str = ""
    scheduler_secret: str = ""

    # Pipeline tuning
    dedup_window_hours: int = 24
    stale_after_minutes: int = 15
    pipeline_timeout_seconds: float = 240.0
    http_timeout_seconds: float = 20.0

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
