"""Shared pytest fixtures for ScopeTrade tests.

This module provides fixtures for:
- Test environment variables and a fresh settings cache
- A mocked RPC capability and a controllable clock
- Test data factories

Usage:
    @pytest.mark.unit
    def test_something(quote_factory):
        quote = quote_factory()
        assert quote.amount_atomic >= 1
"""

import os
from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest

from scopetrade.config.settings import Settings, get_settings
from tests.factories.quote import QuoteRequestFactory, QuoteResultFactory
from tests.factories.trigger_order import TriggerOrderPayloadFactory

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables.

    Loads .env file first, then sets defaults for any missing variables.
    """
    from dotenv import load_dotenv

    original_env = os.environ.copy()

    # Load .env file if it exists (won't override existing env vars)
    load_dotenv()

    os.environ.setdefault("API_HOST", "https://rpc.test.local")
    os.environ.setdefault("LOG_LEVEL", "DEBUG")

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Make every test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings with execution enabled and default quote TTL."""
    return Settings(api_host="https://rpc.test.local", execution_enabled=True)


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def quote_request_factory() -> type[QuoteRequestFactory]:
    """Provide factory for quote requests."""
    return QuoteRequestFactory


@pytest.fixture
def quote_factory() -> type[QuoteResultFactory]:
    """Provide factory for held quotes."""
    return QuoteResultFactory


@pytest.fixture
def trigger_order_payload_factory() -> type[TriggerOrderPayloadFactory]:
    """Provide factory for raw order records as returned by the RPC."""
    return TriggerOrderPayloadFactory


# =============================================================================
# Mock RPC and Clock
# =============================================================================


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def mock_rpc() -> AsyncMock:
    """Mock RPC capability.

    ``call`` returns a minimal quote by default; tests override
    ``return_value`` or ``side_effect`` per scenario.
    """
    mock = AsyncMock()
    mock.call = AsyncMock(
        return_value={
            "inAmount": "500000000",
            "outAmount": "42000000",
            "otherAmountThreshold": "41790000",
            "priceImpactPct": "0.0012",
            "routePlan": [{"swapInfo": {}}],
        }
    )
    return mock


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def valid_solana_address() -> str:
    """Provide a valid Solana wallet address format."""
    return "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


@pytest.fixture
def valid_token_mint() -> str:
    """Provide a valid SPL token mint address (not a known-decimals mint)."""
    return "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


# =============================================================================
# Markers for Test Selection
# =============================================================================

# Usage:
# pytest -m unit          # Run only unit tests
