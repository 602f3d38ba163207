from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Leave Ledger"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://leave_ledger:leave_ledger@db:5432/leave_ledger"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Fallbacks used when the settings store or employee record is silent.
    default_rounding_minutes: int = 15
    default_hours_per_day: float = 8.0
    default_working_days: list[str] = ["ma", "di", "wo", "do", "vr"]

    accrual_interval_seconds: int = 86400


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
