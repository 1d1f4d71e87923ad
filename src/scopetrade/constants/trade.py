"""Quote, execution and trigger-order constants."""

from typing import Final

# Quote lifetime
QUOTE_TTL_SECONDS: Final[int] = 30
STALENESS_TICK_SECONDS: Final[float] = 1.0

# Slippage
DEFAULT_SLIPPAGE_BPS: Final[int] = 50  # 0.5%

# RPC methods
QUOTE_METHOD: Final[str] = "tx/getSwapQuote"
SWAP_METHOD: Final[str] = "tx/swap"
CREATE_TRIGGER_ORDER_METHOD: Final[str] = "tx/createTriggerOrder"
GET_TRIGGER_ORDERS_METHOD: Final[str] = "tx/getTriggerOrders"
CANCEL_TRIGGER_ORDER_METHOD: Final[str] = "tx/cancelTriggerOrder"

# Failure text shown to the user is cut to this length
ERROR_PREVIEW_MAX_CHARS: Final[int] = 240

# Trigger order expiration presets (label, seconds)
EXPIRATION_PRESETS: Final[tuple[tuple[str, int], ...]] = (
    ("1d", 86_400),
    ("3d", 259_200),
    ("7d", 604_800),
)
DEFAULT_EXPIRATION_SECONDS: Final[int] = 604_800  # 7 days
