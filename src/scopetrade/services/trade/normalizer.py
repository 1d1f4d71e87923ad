"""Extraction of a canonical QuoteSummary from a pricing response.

The pricing service has used several field names for the same value over
time. Each logical field lists its aliases in priority order and a single
lookup takes the first one that parses as a finite number.
"""

import math
from collections.abc import Mapping
from typing import Any, Final

from scopetrade.models.quote import QuoteSummary
from scopetrade.services.trade.units import to_ui

AMOUNT_IN_KEYS: Final = ("amount_in", "inAmount", "amountIn")
AMOUNT_IN_MAX_KEYS: Final = ("amount_in_max", "amountInMax")
AMOUNT_OUT_KEYS: Final = ("amount_out", "outAmount", "amountOut")
AMOUNT_OUT_MIN_KEYS: Final = ("amount_out_min", "otherAmountThreshold", "minOutAmount")
PRICE_IMPACT_KEYS: Final = ("priceImpactPct", "price_impact_pct", "priceImpact")
ROUTE_PLAN_KEYS: Final = ("routePlan", "route_plan", "routes")

FEE_INFO_KEY: Final = "quickscope_fee_info"
FEE_AMOUNT_KEYS: Final = ("fee_amount_sol", "feeAmountSol")
FEE_RATE_KEYS: Final = ("user_fee_rate_bps", "userFeeRateBps")


def to_finite_number(value: Any) -> float | None:
    """Parse a number or numeric string, returning None unless finite."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def first_finite(payload: Mapping[str, Any], keys: tuple[str, ...]) -> float | None:
    """Return the first alias in ``keys`` holding a finite number."""
    for key in keys:
        number = to_finite_number(payload.get(key))
        if number is not None:
            return number
    return None


def price_impact_to_percent(value: float | None) -> float | None:
    """Normalize price impact to a percentage.

    Values with magnitude <= 1 are fractions (0.5 -> 50); larger values are
    already percentages (5 -> 5). Exactly 1 takes the fraction branch.
    """
    if value is None:
        return None
    if abs(value) <= 1:
        return value * 100
    return value


def route_hop_count(payload: Mapping[str, Any]) -> int | None:
    """Length of the route plan when it is present as a list."""
    for key in ROUTE_PLAN_KEYS:
        plan = payload.get(key)
        if isinstance(plan, list):
            return len(plan)
    return None


def normalize_quote(raw: Any, output_decimals: int | None = None) -> QuoteSummary:
    """Build a QuoteSummary from a raw pricing response.

    Args:
        raw: Upstream payload; anything that is not a mapping yields an
            all-empty summary.
        output_decimals: Output token decimals. UI amounts are only derived
            when this is known.
    """
    if not isinstance(raw, Mapping):
        return QuoteSummary()

    fee_info = raw.get(FEE_INFO_KEY)
    if not isinstance(fee_info, Mapping):
        fee_info = {}

    out_amount = first_finite(raw, AMOUNT_OUT_KEYS)
    min_out_amount = first_finite(raw, AMOUNT_OUT_MIN_KEYS)

    return QuoteSummary(
        amount_in_atomic=first_finite(raw, AMOUNT_IN_KEYS),
        amount_in_max_atomic=first_finite(raw, AMOUNT_IN_MAX_KEYS),
        out_amount_atomic=out_amount,
        min_out_amount_atomic=min_out_amount,
        price_impact_percent=price_impact_to_percent(first_finite(raw, PRICE_IMPACT_KEYS)),
        fee_amount_sol=first_finite(fee_info, FEE_AMOUNT_KEYS),
        fee_rate_bps=first_finite(fee_info, FEE_RATE_KEYS),
        route_hop_count=route_hop_count(raw),
        amount_out_ui=to_ui(out_amount, output_decimals),
        min_out_amount_ui=to_ui(min_out_amount, output_decimals),
    )
