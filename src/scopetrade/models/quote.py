"""Swap quote data models.

Models for:
- Quote requests as collected from the trade entry screen
- The canonical numeric summary extracted from a pricing response
- Immutable quote results held by the execution state machine
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QuoteRequest(BaseModel):
    """Request for a swap quote in human (UI) units.

    ``amount_ui`` is validated by the quote service, not here, so that an
    invalid amount surfaces as ``InvalidAmountError`` before any RPC call.
    """

    wallet_address: str = Field(..., min_length=1, description="Signed-in wallet")
    input_mint: str = Field(..., min_length=1, description="Mint being sold")
    output_mint: str = Field(..., min_length=1, description="Mint being bought")
    amount_ui: float = Field(..., description="Human-readable input amount")
    input_token_decimals: int | None = Field(None, ge=0)
    output_token_decimals: int | None = Field(None, ge=0)
    slippage_bps: int | None = Field(None, ge=0, le=10000)


class QuoteSummary(BaseModel):
    """Canonical numeric view of a pricing response.

    Every field is optional because upstream responses vary. A missing value
    means "unknown", never zero.
    """

    model_config = ConfigDict(frozen=True)

    amount_in_atomic: float | None = None
    amount_in_max_atomic: float | None = None
    out_amount_atomic: float | None = None
    min_out_amount_atomic: float | None = None
    price_impact_percent: float | None = None
    fee_amount_sol: float | None = None
    fee_rate_bps: float | None = None
    route_hop_count: int | None = None
    amount_out_ui: float | None = None
    min_out_amount_ui: float | None = None


class QuoteResult(BaseModel):
    """A priced quote, created once per request and never mutated.

    ``requested_at_ms`` is the sole basis for staleness. ``raw`` keeps the
    unmodified upstream payload for diagnostics.
    """

    model_config = ConfigDict(frozen=True)

    requested_at_ms: int = Field(..., gt=0)
    wallet_address: str
    input_mint: str
    output_mint: str
    input_token_decimals: int = Field(..., ge=0)
    output_token_decimals: int | None = None
    amount_ui: float = Field(..., gt=0)
    amount_atomic: int = Field(..., ge=1)
    slippage_bps: int = Field(..., ge=0)
    summary: QuoteSummary = Field(default_factory=QuoteSummary)
    raw: Any = None

    @property
    def short_label(self) -> str:
        """Compact description used in log lines."""
        return f"{self.amount_ui} {self.input_mint[:8]}->{self.output_mint[:8]}"
