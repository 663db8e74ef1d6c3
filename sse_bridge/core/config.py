"""
Configuration management using Pydantic Settings.

This module provides type-safe, validated configuration loading from
environment variables.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic
- Internal constants live in sse_bridge/core/constants.py instead

Usage:
    from sse_bridge.core.config import settings

    redis_url = settings.redis_url
    if settings.is_development:
        # Dev-specific behavior
        ...
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sse_bridge.core.enums import BackplaneKind, Environment


class Settings(BaseSettings):
    """
    Main application settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. Default values

    Returns:
        Settings: Application configuration loaded from environment.
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )

    # Core application settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, detailed errors)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Application metadata
    app_name: str = Field(
        default="sse-bridge",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API v1 route prefix",
    )

    # Backplane configuration
    backplane: BackplaneKind = Field(
        default=BackplaneKind.REDIS,
        description="Pub/sub engine backing event streams (redis, memory)",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (e.g., redis://host:port/db)",
    )
    redis_max_connections: int | None = Field(
        default=None,
        description="Connection pool cap. Every open stream holds one pub/sub connection.",
    )

    # Streaming configuration
    sse_stream_timeout_seconds: float | None = Field(
        default=None,
        description="Close streams after this many seconds (unset = until disconnect)",
    )
    sse_retry_interval_ms: int | None = Field(
        default=None,
        description="Client reconnection hint sent as 'retry:' after headers (unset = none)",
    )
    sse_subscriber_queue_size: int = Field(
        default=0,
        description="Per-subscriber queue bound for the in-memory backplane (0 = unbounded)",
    )

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Normalize and validate the log level name.

        Args:
            v: Log level name.

        Returns:
            str: Upper-cased level name.

        Raises:
            ValueError: If the level is not a standard logging level.
        """
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log_level '{v}'")
        return level

    @field_validator("sse_stream_timeout_seconds")
    @classmethod
    def validate_stream_timeout(cls, v: float | None) -> float | None:
        """
        Reject non-positive stream timeouts.

        Args:
            v: Timeout in seconds, or None.

        Returns:
            float | None: Validated timeout.

        Raises:
            ValueError: If timeout is zero or negative.
        """
        if v is not None and v <= 0:
            raise ValueError("sse_stream_timeout_seconds must be positive")
        return v

    @field_validator("sse_subscriber_queue_size")
    @classmethod
    def validate_queue_size(cls, v: int) -> int:
        """
        Reject negative queue sizes.

        Args:
            v: Queue bound.

        Returns:
            int: Validated bound.

        Raises:
            ValueError: If the bound is negative.
        """
        if v < 0:
            raise ValueError("sse_subscriber_queue_size must be >= 0")
        return v

    @field_validator("api_v1_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """
        Remove trailing slashes from the route prefix.

        Args:
            v: Prefix string.

        Returns:
            str: Prefix without trailing slash.
        """
        return v.rstrip("/")

    # Convenience properties for environment checks
    @property
    def is_development(self) -> bool:
        """
        Check if running in development environment.

        Returns:
            bool: True if environment is DEVELOPMENT, False otherwise.
        """
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """
        Check if running in testing environment.

        Returns:
            bool: True if environment is TESTING, False otherwise.
        """
        return self.environment == Environment.TESTING

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.

        Returns:
            bool: True if environment is PRODUCTION, False otherwise.
        """
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()


# Global settings instance (singleton pattern)
settings = get_settings()
