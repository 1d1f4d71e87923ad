"""Conditional order classification and parameter building.

Order types by side and where the target market cap sits:

    buy,  target <  current  -> entry_limit  (buy the dip)
    buy,  target >= current  -> entry_stop   (buy the breakout)
    sell, target >  current  -> exit_limit   (take profit)
    sell, target <= current  -> exit_stop    (stop loss)

The trigger price is the target market cap spread over the token supply.
"""

from __future__ import annotations

import math

import structlog

from scopetrade.config.trade_settings import TradeProfile
from scopetrade.constants.trade import DEFAULT_EXPIRATION_SECONDS, EXPIRATION_PRESETS
from scopetrade.core.exceptions import TriggerUnresolvableError, ValidationError
from scopetrade.models.trigger_order import OrderSide, OrderType, TriggerOrderParams
from scopetrade.services.trade.units import validate_amount

logger = structlog.get_logger(__name__)

ORDER_TYPE_LABELS: dict[OrderType, str] = {
    OrderType.ENTRY_LIMIT: "Limit Buy",
    OrderType.ENTRY_STOP: "Stop Buy",
    OrderType.EXIT_LIMIT: "Limit Sell",
    OrderType.EXIT_STOP: "Stop Loss",
}


def detect_order_type(
    side: OrderSide | str,
    target_market_cap_usd: float,
    current_market_cap_usd: float,
) -> OrderType:
    """Classify a conditional order from its side and target."""
    side = OrderSide(side)
    if side == OrderSide.BUY:
        if target_market_cap_usd < current_market_cap_usd:
            return OrderType.ENTRY_LIMIT
        return OrderType.ENTRY_STOP
    if target_market_cap_usd > current_market_cap_usd:
        return OrderType.EXIT_LIMIT
    return OrderType.EXIT_STOP


def calc_trigger_price(target_market_cap_usd: float, token_supply: float) -> float:
    """USD price per token at which the order fires.

    Raises:
        TriggerUnresolvableError: If the supply is not a finite positive number.
    """
    if not math.isfinite(token_supply) or token_supply <= 0:
        raise TriggerUnresolvableError(
            "Token supply is unavailable. Cannot derive a trigger price."
        )
    return target_market_cap_usd / token_supply


def resolve_expiration(seconds: int | None = None) -> int:
    """Return the expiration to send, defaulting to 7 days.

    Raises:
        ValidationError: If ``seconds`` is not one of the presets.
    """
    if seconds is None:
        return DEFAULT_EXPIRATION_SECONDS
    allowed = [preset for _, preset in EXPIRATION_PRESETS]
    if seconds not in allowed:
        raise ValidationError(f"Expiration must be one of {allowed} seconds.")
    return seconds


def build_params(
    *,
    wallet_address: str,
    mint: str,
    side: OrderSide | str,
    input_amount: float,
    token_decimals: int,
    target_market_cap_usd: float,
    current_market_cap_usd: float,
    token_supply: float,
    expires_in: int | None = None,
    profile: TradeProfile | None = None,
    jito_tip_lamports: int = 0,
) -> TriggerOrderParams:
    """Compose the order RPC parameters for a conditional order.

    Raises:
        InvalidAmountError: If the input amount is not finite or not positive.
        TriggerUnresolvableError: If the target or supply cannot give a price.
        ValidationError: If the expiration is not a preset.
    """
    amount = validate_amount(input_amount)
    if not math.isfinite(target_market_cap_usd) or target_market_cap_usd <= 0:
        raise TriggerUnresolvableError("Enter a target market cap greater than 0.")

    profile = profile or TradeProfile()
    order_type = detect_order_type(side, target_market_cap_usd, current_market_cap_usd)
    trigger_price_usd = calc_trigger_price(target_market_cap_usd, token_supply)

    logger.debug(
        "trigger_order_built",
        mint=mint[:8],
        order_type=order_type.value,
        target_market_cap_usd=target_market_cap_usd,
        current_market_cap_usd=current_market_cap_usd,
    )

    return TriggerOrderParams(
        wallet_address=wallet_address,
        mint=mint,
        order_type=order_type,
        input_amount=amount,
        token_decimals=token_decimals,
        trigger_price_usd=trigger_price_usd,
        expires_in=resolve_expiration(expires_in),
        slippage_bps=profile.slippage_bps,
        priority_fee_lamports=profile.priority_lamports,
        jito_tip_lamports=jito_tip_lamports,
    )


def order_type_label(order_type: OrderType | str) -> str:
    return ORDER_TYPE_LABELS[OrderType(order_type)]


def format_expires_in(expires_at_s: int, now_s: int) -> str:
    """Time left on an order, e.g. "2d 3h", "5h 12m", "7m" or "Expired"."""
    remaining = expires_at_s - now_s
    if remaining <= 0:
        return "Expired"

    days = remaining // 86_400
    hours = (remaining % 86_400) // 3_600
    if days > 0:
        return f"{days}d {hours}h"
    minutes = (remaining % 3_600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
