"""Logging configuration using structlog.

Every engine module logs through ``structlog.get_logger(__name__)`` with
snake_case event names; this module wires the processors once at startup.
"""

import logging
import sys

import structlog

from scopetrade.config.settings import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the engine.

    Args:
        settings: Settings to read level and renderer from. Defaults to the
            cached application settings.
    """
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            # Pretty console output while debugging, JSON lines otherwise
            structlog.dev.ConsoleRenderer()
            if settings.debug
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx reports through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    structlog.contextvars.bind_contextvars(
        app=settings.app_name,
        version=settings.app_version,
    )


def bind_session(wallet_address: str) -> None:
    """Attach the signed-in wallet to every subsequent log line."""
    structlog.contextvars.bind_contextvars(wallet=wallet_address[:8])


def clear_session() -> None:
    """Drop the wallet binding on sign-out."""
    structlog.contextvars.unbind_contextvars("wallet")

