"""Conditional (trigger) order classification and RPC wrapper."""

from scopetrade.services.trigger.engine import (
    build_params,
    calc_trigger_price,
    detect_order_type,
    format_expires_in,
    order_type_label,
    resolve_expiration,
)
from scopetrade.services.trigger.order_service import TriggerOrderService

__all__ = [
    "TriggerOrderService",
    "build_params",
    "calc_trigger_price",
    "detect_order_type",
    "format_expires_in",
    "order_type_label",
    "resolve_expiration",
]
