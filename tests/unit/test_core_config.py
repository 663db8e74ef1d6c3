"""
Unit tests for configuration management (flat Settings).

Tests cover:
- Settings loading from environment variables
- Environment detection
- Validation (log level, timeout, queue size, prefix)
- Default values
- Cached singleton behavior
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from sse_bridge.core.config import Settings, get_settings
from sse_bridge.core.enums import BackplaneKind, Environment


@pytest.mark.unit
class TestEnvironmentEnum:
    """Test Environment enum."""

    def test_environment_values(self):
        """Test that all expected environments are defined."""
        assert Environment.DEVELOPMENT == "development"
        assert Environment.TESTING == "testing"
        assert Environment.CI == "ci"
        assert Environment.PRODUCTION == "production"

    def test_backplane_kind_values(self):
        assert BackplaneKind.REDIS == "redis"
        assert BackplaneKind.MEMORY == "memory"


@pytest.mark.unit
class TestSettingsDefaults:
    """Test default values with an empty environment."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.environment is Environment.DEVELOPMENT
        assert settings.backplane is BackplaneKind.REDIS
        assert settings.redis_url == "redis://localhost:6379/0"
        assert settings.api_v1_prefix == "/api/v1"
        assert settings.sse_stream_timeout_seconds is None
        assert settings.sse_retry_interval_ms is None
        assert settings.sse_subscriber_queue_size == 0
        assert settings.log_level == "INFO"


@pytest.mark.unit
class TestSettingsLoading:
    """Test loading from environment variables."""

    def test_loads_streaming_settings(self):
        env = {
            "BACKPLANE": "memory",
            "SSE_STREAM_TIMEOUT_SECONDS": "30",
            "SSE_RETRY_INTERVAL_MS": "5000",
            "SSE_SUBSCRIBER_QUEUE_SIZE": "100",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings()

        assert settings.backplane is BackplaneKind.MEMORY
        assert settings.sse_stream_timeout_seconds == 30.0
        assert settings.sse_retry_interval_ms == 5000
        assert settings.sse_subscriber_queue_size == 100

    def test_env_names_are_case_insensitive(self):
        with patch.dict(os.environ, {"redis_url": "redis://cache:6380/1"}, clear=True):
            settings = Settings()

        assert settings.redis_url == "redis://cache:6380/1"


@pytest.mark.unit
class TestSettingsValidation:
    """Test Settings field validation."""

    def test_log_level_is_upper_cased(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            assert Settings().log_level == "DEBUG"

    def test_log_level_invalid(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "chatty"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    @pytest.mark.parametrize("timeout", ["0", "-1"])
    def test_stream_timeout_must_be_positive(self, timeout):
        with patch.dict(
            os.environ, {"SSE_STREAM_TIMEOUT_SECONDS": timeout}, clear=True
        ):
            with pytest.raises(ValidationError):
                Settings()

    def test_queue_size_cannot_be_negative(self):
        with patch.dict(os.environ, {"SSE_SUBSCRIBER_QUEUE_SIZE": "-1"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    def test_unknown_backplane_rejected(self):
        with patch.dict(os.environ, {"BACKPLANE": "kafka"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    def test_prefix_trailing_slash_removed(self):
        with patch.dict(os.environ, {"API_V1_PREFIX": "/api/v1/"}, clear=True):
            assert Settings().api_v1_prefix == "/api/v1"


@pytest.mark.unit
class TestEnvironmentDetection:
    """Test is_* convenience properties."""

    @pytest.mark.parametrize(
        ("environment", "dev", "testing", "prod"),
        [
            ("development", True, False, False),
            ("testing", False, True, False),
            ("ci", False, False, False),
            ("production", False, False, True),
        ],
    )
    def test_environment_flags(self, environment, dev, testing, prod):
        with patch.dict(os.environ, {"ENVIRONMENT": environment}, clear=True):
            settings = Settings()

        assert settings.is_development is dev
        assert settings.is_testing is testing
        assert settings.is_production is prod


@pytest.mark.unit
class TestGetSettings:
    """Test cached singleton behavior."""

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()

        assert get_settings() is get_settings()

    def test_cache_clear_reloads_environment(self):
        with patch.dict(os.environ, {"APP_NAME": "first"}, clear=True):
            get_settings.cache_clear()
            assert get_settings().app_name == "first"

        with patch.dict(os.environ, {"APP_NAME": "second"}, clear=True):
            get_settings.cache_clear()
            assert get_settings().app_name == "second"
