"""Configuration management for the custom fields engine."""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


class Settings(BaseModel):
    """Application configuration loaded from environment variables."""

    app_env: str = "dev"
    database_url: str = "sqlite:///./fields.db"
    cors_origins: list[str] = Field(default_factory=list)
    version: str = "0.1.0"
    default_language: Literal["en", "ar"] = "en"
    seed_templates_on_startup: bool = False
    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            if not value:
                return []
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        if isinstance(value, list):
            return value
        return []

    @field_validator("default_language", mode="before")
    @classmethod
    def normalize_language(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def async_database_url(self) -> str:
        if self.database_url.startswith("sqlite+aiosqlite://"):
            return self.database_url
        if self.database_url.startswith("sqlite:///"):
            return self.database_url.replace("sqlite:///", "sqlite+aiosqlite:///")
        if self.database_url.startswith("sqlite://"):
            return self.database_url.replace("sqlite://", "sqlite+aiosqlite://")
        return self.database_url


def _build_settings() -> Settings:
    raw_values: dict[str, Any] = {
        "app_env": os.getenv("APP_ENV"),
        "database_url": os.getenv("DATABASE_URL"),
        "cors_origins": os.getenv("CORS_ORIGINS"),
        "version": os.getenv("APP_VERSION"),
        "default_language": os.getenv("DEFAULT_LANGUAGE"),
        "seed_templates_on_startup": os.getenv("SEED_TEMPLATES_ON_STARTUP"),
        "log_level": os.getenv("LOG_LEVEL"),
    }
    filtered_values = {key: value for key, value in raw_values.items() if value is not None}
    return Settings(**filtered_values)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return _build_settings()
