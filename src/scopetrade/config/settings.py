"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scopetrade.constants.trade import (
    DEFAULT_SLIPPAGE_BPS,
    QUOTE_TTL_SECONDS,
    STALENESS_TICK_SECONDS,
)


class Settings(BaseSettings):
    """ScopeTrade configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    app_name: str = Field(default="ScopeTrade", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Pricing / execution RPC
    api_host: str = Field(
        default="https://api.quickscope.gg",
        description="Base URL of the pricing and execution RPC service",
    )
    rpc_timeout_seconds: float = Field(
        default=15.0, gt=0, le=120, description="Per-call RPC timeout"
    )

    # Circuit Breaker
    circuit_breaker_threshold: int = Field(
        default=5, ge=1, description="Failures before circuit opens"
    )
    circuit_breaker_cooldown: int = Field(
        default=30, ge=1, description="Seconds before half-open"
    )

    # Quotes
    quote_ttl_seconds: int = Field(
        default=QUOTE_TTL_SECONDS, ge=1, le=600, description="Seconds a quote stays actionable"
    )
    staleness_tick_seconds: float = Field(
        default=STALENESS_TICK_SECONDS,
        gt=0,
        le=10,
        description="Cadence of the quote expiry check",
    )
    default_slippage_bps: int = Field(
        default=DEFAULT_SLIPPAGE_BPS,
        ge=0,
        le=10000,
        description="Slippage used when a request omits it",
    )

    # Execution gate (builds without execution can still quote)
    execution_enabled: bool = Field(
        default=False, description="Allow submitting swaps to the execution RPC"
    )

    @field_validator("api_host")
    @classmethod
    def validate_api_host(cls, v: str) -> str:
        """Validate API host URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("API host must start with http:// or https://")
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
