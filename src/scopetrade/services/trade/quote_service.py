"""Swap quote orchestration.

Implements:
- Input validation before any network call
- UI -> atomic amount conversion with resolved decimals
- The pricing RPC call with a no-priority / no-tip fee hint
- Normalization and timestamping of the result
"""

from __future__ import annotations

import time

import structlog

from scopetrade.config.settings import Settings, get_settings
from scopetrade.constants.trade import ERROR_PREVIEW_MAX_CHARS, QUOTE_METHOD
from scopetrade.core.clock import Clock, system_clock_ms
from scopetrade.core.exceptions import QuoteFaultError
from scopetrade.models.quote import QuoteRequest, QuoteResult
from scopetrade.services.rpc.protocol import RpcCaller
from scopetrade.services.trade.normalizer import normalize_quote
from scopetrade.services.trade.units import resolve_decimals, to_atomic, validate_amount

logger = structlog.get_logger(__name__)

# Quotes are priced without priority fee or tip
QUOTE_FEE_HINT = {"priority_fee_lamports": 0, "tip_amount_lamports": 0}


class QuoteService:
    """Turns a QuoteRequest into an immutable, timestamped QuoteResult.

    No retries happen here: a failed pricing call surfaces as
    ``QuoteFaultError`` and the user decides whether to ask again.
    """

    def __init__(
        self,
        rpc: RpcCaller,
        settings: Settings | None = None,
        clock: Clock = system_clock_ms,
    ) -> None:
        self._rpc = rpc
        self._settings = settings or get_settings()
        self._clock = clock
        self._last_requested_at_ms = 0

    def validate(self, request: QuoteRequest) -> tuple[float, int, int]:
        """Check a request without calling the pricing service.

        Returns:
            The validated UI amount, the resolved input decimals and the
            atomic amount that will be priced.

        Raises:
            InvalidAmountError: If the amount is not finite or not positive,
                or does not convert with the resolved decimals.
            DecimalsUnavailableError: If input decimals cannot be resolved.
        """
        amount_ui = validate_amount(request.amount_ui)
        input_decimals = resolve_decimals(request.input_mint, request.input_token_decimals)
        return amount_ui, input_decimals, to_atomic(amount_ui, input_decimals)

    async def request_quote(self, request: QuoteRequest) -> QuoteResult:
        """Request a swap quote.

        Args:
            request: Quote request in UI units.

        Returns:
            QuoteResult stamped with the wall-clock time at which the
            pricing response was accepted.

        Raises:
            InvalidAmountError: If the amount is not finite or not positive.
            DecimalsUnavailableError: If input decimals cannot be resolved.
            QuoteFaultError: If the pricing RPC fails or returns nothing.
        """
        amount_ui, input_decimals, amount_atomic = self.validate(request)
        slippage_bps = (
            request.slippage_bps
            if request.slippage_bps is not None
            else self._settings.default_slippage_bps
        )

        log = logger.bind(
            input_mint=request.input_mint[:8],
            output_mint=request.output_mint[:8],
            amount_atomic=amount_atomic,
        )
        log.info("quote_requested", slippage_bps=slippage_bps)

        start = time.perf_counter()

        try:
            raw = await self._rpc.call(
                QUOTE_METHOD,
                [
                    request.wallet_address,
                    request.input_mint,
                    request.output_mint,
                    amount_atomic,
                    slippage_bps,
                    dict(QUOTE_FEE_HINT),
                ],
            )
        except Exception as e:
            log.error("quote_failed", error=str(e))
            raise QuoteFaultError(f"Quote failed: {e}"[:ERROR_PREVIEW_MAX_CHARS]) from e

        if raw is None:
            log.error("quote_empty")
            raise QuoteFaultError("Quote failed: pricing service returned no quote")

        summary = normalize_quote(raw, request.output_token_decimals)
        requested_at_ms = self._next_timestamp()
        log.info(
            "quote_received",
            out_amount_atomic=summary.out_amount_atomic,
            price_impact_percent=summary.price_impact_percent,
            route_hop_count=summary.route_hop_count,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )

        return QuoteResult(
            requested_at_ms=requested_at_ms,
            wallet_address=request.wallet_address,
            input_mint=request.input_mint,
            output_mint=request.output_mint,
            input_token_decimals=input_decimals,
            output_token_decimals=request.output_token_decimals,
            amount_ui=amount_ui,
            amount_atomic=amount_atomic,
            slippage_bps=slippage_bps,
            summary=summary,
            raw=raw,
        )

    def _next_timestamp(self) -> int:
        """Wall-clock stamp, strictly increasing across requests."""
        stamp = max(int(self._clock()), self._last_requested_at_ms + 1)
        self._last_requested_at_ms = stamp
        return stamp
