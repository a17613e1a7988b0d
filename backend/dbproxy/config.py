"""
Application configuration loaded from environment variables.
"""
from functools import lru_cache
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from dbproxy.core.errors import ConfigError


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # MongoDB connection template, e.g.
    # mongodb+srv://user:<PASSWORD>@cluster0.example.net/?retryWrites=true
    mongo_uri: str = ""
    mongo_pass: str = ""

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000

    # Startup connectivity check
    default_database: str = "BigBoxStore"
    default_collection: str = "GroceryInventory"

    # Timeouts
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    operation_timeout_seconds: float = Field(default=30.0, gt=0)

    # Document schemas: "grocery" or "none", overridable per collection
    default_schema: str = "grocery"
    collection_schemas: dict[str, str] = Field(default_factory=dict)

    # Logging
    log_level: str = "INFO"

    def describe(self) -> dict[str, Any]:
        """Summarize settings for the startup log without leaking secrets."""
        return {
            "MONGO_URI": "Present" if self.mongo_uri else "Missing",
            "MONGO_PASS": "Present" if self.mongo_pass else "Missing",
            "PORT": self.port,
            "DEFAULT_SCHEMA": self.default_schema,
        }


def load_settings(**overrides: Any) -> Settings:
    """Build settings, turning validation failures into ConfigError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
