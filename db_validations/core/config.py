"""Runtime settings for database-backed validations."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DB_VALIDATIONS_",
        env_file=".env",
        extra="ignore",
    )

    database_url: str = "sqlite+aiosqlite:///./db_validations.db"
    # Reported for uniqueness validators that leave case sensitivity unspecified.
    case_sensitive_default: bool = True
    strict_index_lookup: bool = True
    sqlite_enforce_foreign_keys: bool = True
    log_level: str = "INFO"


settings = Settings()

__all__ = ["Settings", "settings"]
