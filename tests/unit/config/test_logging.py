"""Unit tests for structlog configuration."""

import logging
from collections.abc import Generator

import pytest
import structlog

from scopetrade.config.logging import bind_session, clear_session, configure_logging
from scopetrade.config.settings import Settings


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_renderer_outside_debug(self) -> None:
        configure_logging(Settings(debug=False, log_level="INFO"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_in_debug(self) -> None:
        configure_logging(Settings(debug=True, log_level="DEBUG"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_httpx_logger_is_quieted(self) -> None:
        """httpx never logs below WARNING even in debug."""
        configure_logging(Settings(debug=True, log_level="DEBUG"))

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_binds_app_context(self) -> None:
        configure_logging(Settings(app_name="ScopeTrade", app_version="9.9.9"))

        context = structlog.contextvars.get_contextvars()
        assert context["app"] == "ScopeTrade"
        assert context["version"] == "9.9.9"


class TestSessionBinding:
    """Tests for wallet binding on log lines."""

    def test_bind_session_truncates_wallet(self) -> None:
        bind_session("7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU")

        assert structlog.contextvars.get_contextvars()["wallet"] == "7xKXtg2C"

    def test_clear_session(self) -> None:
        bind_session("7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU")
        clear_session()

        assert "wallet" not in structlog.contextvars.get_contextvars()
