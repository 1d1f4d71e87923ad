"""Conversion between UI token amounts and atomic (base-unit) amounts.

Atomic amounts are integers in a token's smallest unit. Conversion to atomic
floors and then clamps to 1 so that a tiny positive input never produces a
zero-amount transaction::

    >>> to_atomic(0.5, 9)
    500000000
    >>> to_atomic(0.00000001, 6)  # floor gives 0, clamp gives 1
    1

The reverse conversion is lossy by up to one atomic unit because of the floor.
"""

import math

from scopetrade.constants.tokens import KNOWN_MINT_DECIMALS
from scopetrade.core.exceptions import DecimalsUnavailableError, InvalidAmountError

DECIMALS_UNAVAILABLE_MESSAGE = (
    "Input token decimals are unavailable. Use SOL input or provide token decimals."
)


def _is_finite_number(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def resolve_decimals(mint: str, explicit: int | None = None) -> int:
    """Resolve a token's decimal count.

    Args:
        mint: Token mint address.
        explicit: Caller-supplied decimals, used when finite.

    Returns:
        The explicit value, or the known-mint table entry.

    Raises:
        DecimalsUnavailableError: If neither source has a value.
    """
    if explicit is not None and _is_finite_number(explicit):
        return int(explicit)

    known = KNOWN_MINT_DECIMALS.get(mint)
    if known is not None:
        return known

    raise DecimalsUnavailableError(DECIMALS_UNAVAILABLE_MESSAGE, mint=mint)


def validate_amount(amount_ui: float) -> float:
    """Check that a UI amount is finite and strictly positive.

    Raises:
        InvalidAmountError: Otherwise.
    """
    if not _is_finite_number(amount_ui) or amount_ui <= 0:
        raise InvalidAmountError("Enter an amount greater than 0.")
    return float(amount_ui)


def to_atomic(amount_ui: float, decimals: int) -> int:
    """Convert a UI amount to atomic units.

    Returns:
        ``max(1, floor(amount_ui * 10**decimals))``.

    Raises:
        InvalidAmountError: If the amount is not finite or not positive, or if
            the decimals give an unusable multiplier.
    """
    amount = validate_amount(amount_ui)

    try:
        multiplier = 10.0**decimals
    except (OverflowError, TypeError) as e:
        raise InvalidAmountError("Invalid token decimals for quote conversion.") from e
    if not math.isfinite(multiplier) or multiplier <= 0:
        raise InvalidAmountError("Invalid token decimals for quote conversion.")

    scaled = amount * multiplier
    if not math.isfinite(scaled):
        raise InvalidAmountError("Amount is too large for token decimals.")

    return max(1, math.floor(scaled))


def to_ui(amount_atomic: float | None, decimals: int | None) -> float | None:
    """Convert an atomic amount to UI units.

    Returns None when either input is unknown instead of guessing.
    """
    if amount_atomic is None or decimals is None:
        return None
    return amount_atomic / 10**decimals
