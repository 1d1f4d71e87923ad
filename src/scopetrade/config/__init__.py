"""Configuration module for ScopeTrade.

Usage:
    from scopetrade.config import get_settings

    settings = get_settings()  # Cached singleton
    print(settings.quote_ttl_seconds)

Note:
    There is no module-level ``settings`` instance; call ``get_settings()``
    so that tests can override the environment before the first read.
"""

from scopetrade.config.settings import Settings, get_settings
from scopetrade.config.trade_settings import (
    DEFAULT_TRADE_SETTINGS,
    TradeProfile,
    TradeSettings,
)

__all__ = [
    "DEFAULT_TRADE_SETTINGS",
    "Settings",
    "TradeProfile",
    "TradeSettings",
    "get_settings",
]
