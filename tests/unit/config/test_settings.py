"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from scopetrade.config.settings import Settings, get_settings


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_default_settings_are_valid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Default settings should pass all validation."""
        for var in ("DEBUG", "LOG_LEVEL", "API_HOST", "EXECUTION_ENABLED"):
            monkeypatch.delenv(var, raising=False)

        # Use _env_file=None to ignore .env and test true defaults
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.quote_ttl_seconds == 30
        assert settings.staleness_tick_seconds == 1.0
        assert settings.default_slippage_bps == 50
        assert settings.execution_enabled is False

    def test_log_level_must_be_valid(self) -> None:
        """Log level must be one of the allowed values."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR"]:
            settings = Settings(log_level=level)  # type: ignore[arg-type]
            assert settings.log_level == level

        with pytest.raises(ValidationError):
            Settings(log_level="INVALID")  # type: ignore[arg-type]

    def test_api_host_validation(self) -> None:
        """API host must use HTTP(S) and loses its trailing slash."""
        assert Settings(api_host="https://rpc.example.com/").api_host == "https://rpc.example.com"
        assert Settings(api_host="http://localhost:8080").api_host == "http://localhost:8080"

        with pytest.raises(ValidationError) as exc_info:
            Settings(api_host="ws://rpc.example.com")
        assert "API host must start with" in str(exc_info.value)

    def test_quote_ttl_must_be_positive(self) -> None:
        """A zero TTL would make every quote stale on arrival."""
        with pytest.raises(ValidationError):
            Settings(quote_ttl_seconds=0)

    def test_slippage_range(self) -> None:
        """Default slippage is bounded to 0..10000 bps."""
        Settings(default_slippage_bps=0)
        Settings(default_slippage_bps=10000)

        with pytest.raises(ValidationError):
            Settings(default_slippage_bps=10001)


class TestSettingsEnvironment:
    """Tests for reading settings from the environment."""

    def test_reads_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Env vars are matched case-insensitively to field names."""
        monkeypatch.setenv("QUOTE_TTL_SECONDS", "45")
        monkeypatch.setenv("EXECUTION_ENABLED", "true")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.quote_ttl_seconds == 45
        assert settings.execution_enabled is True

    def test_get_settings_is_cached(self) -> None:
        """get_settings returns the same instance until the cache is cleared."""
        first = get_settings()
        assert get_settings() is first

        get_settings.cache_clear()
        assert get_settings() is not first
