"""Conditional (trigger) order models.

A trigger order fires when a token's price crosses ``trigger_price_usd``.
The order type is derived from the requested side and where the target sits
relative to the live market cap.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scopetrade.constants.trade import EXPIRATION_PRESETS


class OrderSide(str, Enum):
    """Order side."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """Conditional order kind.

    entry = buy, exit = sell; limit fires on a favorable move, stop fires on
    a breakout (buy) or breakdown (sell).
    """

    ENTRY_LIMIT = "entry_limit"  # Buy below market
    ENTRY_STOP = "entry_stop"  # Buy on breakout above market
    EXIT_LIMIT = "exit_limit"  # Sell above market, take-profit
    EXIT_STOP = "exit_stop"  # Sell below market, stop-loss

    @property
    def side(self) -> OrderSide:
        """Side implied by the order type."""
        if self in (OrderType.ENTRY_LIMIT, OrderType.ENTRY_STOP):
            return OrderSide.BUY
        return OrderSide.SELL


# Order types written by older order-service records
LEGACY_ORDER_TYPES: dict[str, OrderType] = {
    "limit_buy": OrderType.ENTRY_LIMIT,
    "limit_sell": OrderType.EXIT_LIMIT,
    "stop_loss": OrderType.EXIT_STOP,
}


class TriggerOrderStatus(str, Enum):
    """Status reported by the conditional-order service."""

    ACTIVE = "active"
    EXECUTING = "executing"
    FILLED = "filled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    FAILED = "failed"


class TriggerOrderParams(BaseModel):
    """Parameters of a conditional order sent to the order RPC."""

    wallet_address: str = Field(..., min_length=1)
    mint: str = Field(..., min_length=1)
    order_type: OrderType
    input_amount: float = Field(..., gt=0, description="UI amount to spend or sell")
    token_decimals: int = Field(..., ge=0)
    trigger_price_usd: float = Field(..., gt=0)
    expires_in: int = Field(..., description="Seconds until the order expires")
    slippage_bps: int = Field(..., ge=0, le=10000)
    priority_fee_lamports: int = Field(default=0, ge=0)
    jito_tip_lamports: int = Field(default=0, ge=0)

    @field_validator("expires_in")
    @classmethod
    def validate_expires_in(cls, v: int) -> int:
        """Expiration must be one of the fixed presets."""
        allowed = [seconds for _, seconds in EXPIRATION_PRESETS]
        if v not in allowed:
            raise ValueError(f"expires_in must be one of {allowed}")
        return v

    def to_rpc_payload(self) -> dict[str, Any]:
        """Snake-case object expected by the order RPC."""
        return {
            "wallet_address": self.wallet_address,
            "mint": self.mint,
            "order_type": self.order_type.value,
            "input_amount": self.input_amount,
            "token_decimals": self.token_decimals,
            "trigger_price_usd": self.trigger_price_usd,
            "expires_in": self.expires_in,
            "slippage_bps": self.slippage_bps,
            "priority_fee_lamports": self.priority_fee_lamports,
            "jito_tip_lamports": self.jito_tip_lamports,
        }


class TriggerOrder(BaseModel):
    """Conditional order record returned by the order RPC."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uuid: str
    user_account: str | None = Field(None, alias="userAccount")
    order_type: OrderType = Field(..., alias="orderType")
    mint: str
    input_amount: str | None = Field(None, alias="inputAmount")
    initial_price_usd: float | None = Field(None, alias="initialPriceUSD")
    trigger_price_usd: float = Field(..., alias="triggerPriceUSD")
    expires_at: int | None = Field(None, alias="expiresAt")
    created_at: int | None = Field(None, alias="createdAt")
    updated_at: int | None = Field(None, alias="updatedAt")
    status: TriggerOrderStatus = TriggerOrderStatus.ACTIVE
    priority_fee_lamports: str | None = Field(None, alias="priorityFeeLamports")
    jito_tip_lamports: str | None = Field(None, alias="jitoTipLamports")
    slippage_bps: int | None = Field(None, alias="slippageBps")
    signature: str | None = None

    @field_validator("order_type", mode="before")
    @classmethod
    def map_legacy_order_type(cls, v: Any) -> Any:
        """Accept the older limit_buy / limit_sell / stop_loss names."""
        if isinstance(v, str):
            return LEGACY_ORDER_TYPES.get(v, v)
        return v

    @property
    def is_open(self) -> bool:
        """Check if the order can still fire."""
        return self.status in (TriggerOrderStatus.ACTIVE, TriggerOrderStatus.EXECUTING)
