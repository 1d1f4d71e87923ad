"""Swap execution through the execution RPC."""

from __future__ import annotations

import json
from typing import Any

import structlog
from pydantic import ValidationError

from scopetrade.constants.trade import ERROR_PREVIEW_MAX_CHARS, SWAP_METHOD
from scopetrade.core.clock import Clock, system_clock_ms
from scopetrade.core.exceptions import ExecutionFaultError
from scopetrade.models.execution import SwapExecutionRequest, SwapExecutionResult
from scopetrade.services.rpc.protocol import RpcCaller

logger = structlog.get_logger(__name__)


def error_preview(err: Any) -> str | None:
    """Compact JSON rendering of an upstream error, cut for display."""
    if err is None:
        return None
    try:
        text = json.dumps(err, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        text = str(err)
    return text[:ERROR_PREVIEW_MAX_CHARS]


class SwapExecutionService:
    """Submits a quoted swap and parses the execution result."""

    def __init__(self, rpc: RpcCaller, clock: Clock = system_clock_ms) -> None:
        self._rpc = rpc
        self._clock = clock

    async def request_execution(self, request: SwapExecutionRequest) -> SwapExecutionResult:
        """Submit a swap.

        The result may lack a signature (e.g. upstream status "failed"); it is
        up to the caller to treat that as a failure.

        Raises:
            ExecutionFaultError: If the execution RPC call fails or its result
                cannot be parsed.
        """
        log = logger.bind(
            input_mint=request.input_mint[:8],
            output_mint=request.output_mint[:8],
            amount_atomic=request.amount_atomic,
        )
        log.info("swap_submitting", slippage_bps=request.slippage_bps)

        try:
            raw = await self._rpc.call(
                SWAP_METHOD,
                [
                    request.wallet_address,
                    request.input_mint,
                    request.output_mint,
                    request.amount_atomic,
                    request.slippage_bps,
                    {
                        "priority_fee_lamports": request.priority_fee_lamports,
                        "tip_amount_lamports": request.jito_tip_lamports,
                    },
                ],
            )
        except Exception as e:
            log.error("swap_rpc_failed", error=str(e))
            raise ExecutionFaultError(
                f"Swap failed: {e}", preview=str(e)[:ERROR_PREVIEW_MAX_CHARS]
            ) from e

        execution = raw.get("execution_result") if isinstance(raw, dict) else None
        if not isinstance(execution, dict):
            execution = {}

        try:
            result = SwapExecutionResult(
                requested_at_ms=int(self._clock()),
                status=execution.get("status"),
                signature=execution.get("signature") or None,
                execution_id=execution.get("id"),
                creation_time=execution.get("creation_time"),
                execution_time=execution.get("execution_time"),
                error_preview=error_preview(execution.get("err")),
                raw=raw,
            )
        except ValidationError as e:
            log.error("swap_result_unreadable", error=str(e))
            status = execution.get("status")
            raise ExecutionFaultError(
                "Swap failed: unreadable execution result",
                preview=f"Unreadable execution result: {error_preview(execution)}"[
                    :ERROR_PREVIEW_MAX_CHARS
                ],
                status=status if isinstance(status, str) else None,
            ) from e

        if result.was_successful:
            log.info(
                "swap_submitted",
                signature=result.signature[:16] if result.signature else None,
                status=result.status,
            )
        else:
            log.warning("swap_without_signature", status=result.status, error=result.error_preview)
        return result
