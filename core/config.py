"""
Configuration management using Pydantic Settings.
Follows Single Responsibility Principle - only handles configuration.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore

from core.constants import DEFAULT_HTTP_PORT


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=(),  # Allow 'model_*' fields
    )

    # Application
    app_name: str = Field(default="Vosk HTTP Server", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # API Service
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=DEFAULT_HTTP_PORT, alias="PORT")

    # Vosk model directory (required at startup, CLI --model overrides)
    model_dir: Optional[str] = Field(default=None, alias="MODEL_DIR")

    # Raw debug setting: unset, "true" (internal debug only) or an integer
    # (internal debug plus Vosk log level). Resolved by core.debug.
    debug: Optional[str] = Field(default=None, alias="DEBUG")

    # Maximum accumulated POST body size in bytes, 0 = unbounded
    max_body_size_bytes: int = Field(default=0, alias="MAX_BODY_SIZE_BYTES")

    # Threads used to run engine calls off the event loop
    engine_workers: int = Field(default=2, alias="ENGINE_WORKERS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Log format: "console" (colored, human-readable) or "json" (for log aggregation)
    log_format: str = Field(default="console", alias="LOG_FORMAT")
    # Enable/disable file logging (logs/app.log and logs/error.log)
    log_file_enabled: bool = Field(default=False, alias="LOG_FILE_ENABLED")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Using lru_cache to ensure single instance (Singleton pattern).
    """
    return Settings()
