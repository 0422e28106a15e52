"""
Configuration management using pydantic-settings.

Loads settings from environment variables and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


StorageBackend = Literal["memory", "mongodb", "supabase", "sqlite"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage selection
    storage_backend: StorageBackend = Field(
        default="memory",
        description="Record store backend: memory, mongodb, supabase or sqlite",
    )
    storage_fallback_to_memory: bool = Field(
        default=True,
        description="Use in-memory storage when the configured backend is unreachable",
    )
    entries_table: str = Field(
        default="entries",
        description="Table/collection holding one row per entry",
    )

    # MongoDB Configuration
    mongodb_uri: Optional[str] = Field(
        default=None,
        description="MongoDB connection string",
    )
    mongodb_database: str = Field(
        default="claim_intake",
        description="Database used when the URI does not name one",
    )
    mongodb_timeout_ms: int = Field(
        default=5000,
        description="Server selection timeout for the startup ping (ms)",
    )

    # Supabase Configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key",
    )

    # SQLite Configuration
    sqlite_path: Path = Field(
        default=Path("data") / "entries.db",
        description="SQLite database file for the sqlite backend",
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3001, description="Server port")
    debug: bool = Field(default=False, description="Enable debug mode")
    cors_origins: List[str] = Field(
        default=["*"],
        description="Origins allowed to call the API from a browser",
    )

    @property
    def mongodb_configured(self) -> bool:
        return bool(self.mongodb_uri)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to avoid re-reading environment on every call.
    """
    return Settings()
