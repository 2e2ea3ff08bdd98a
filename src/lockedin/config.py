"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with LOCKEDIN_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="LOCKEDIN_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    service_name: str = "lockedin"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3456
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Database ---
    database_url: str = "sqlite+aiosqlite:///./lockedin.db"
    database_echo: bool = False
    database_busy_timeout: float = 30.0
    create_tables_on_startup: bool = True

    # --- Accounts ---
    username_min_length: int = 2
    username_max_length: int = 32

    # --- Groups ---
    invite_code_length: int = 6
    invite_code_max_attempts: int = 10


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
