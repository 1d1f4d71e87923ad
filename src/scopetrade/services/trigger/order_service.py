"""Conditional order RPC wrapper.

Wraps:
- tx/createTriggerOrder
- tx/getTriggerOrders
- tx/cancelTriggerOrder
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from scopetrade.constants.trade import (
    CANCEL_TRIGGER_ORDER_METHOD,
    CREATE_TRIGGER_ORDER_METHOD,
    GET_TRIGGER_ORDERS_METHOD,
)
from scopetrade.core.exceptions import ExternalServiceError
from scopetrade.models.trigger_order import TriggerOrder, TriggerOrderParams, TriggerOrderStatus
from scopetrade.services.rpc.protocol import RpcCaller

logger = structlog.get_logger(__name__)


class TriggerOrderService:
    """Creates, lists and cancels conditional orders for a wallet."""

    def __init__(self, rpc: RpcCaller) -> None:
        self._rpc = rpc

    async def create(self, params: TriggerOrderParams) -> TriggerOrder:
        """Place a conditional order.

        Returns:
            The order record acknowledged by the service.

        Raises:
            ExternalServiceError: If the service rejects the order or answers
                with an unreadable record.
        """
        log = logger.bind(
            wallet=params.wallet_address[:8],
            mint=params.mint[:8],
            order_type=params.order_type.value,
        )
        log.info(
            "trigger_order_creating",
            trigger_price_usd=params.trigger_price_usd,
            expires_in=params.expires_in,
        )

        raw = await self._rpc.call(CREATE_TRIGGER_ORDER_METHOD, [params.to_rpc_payload()])
        order = self._parse_order(raw)

        log.info("trigger_order_created", order_id=order.uuid, status=order.status.value)
        return order

    async def get(
        self,
        wallet_address: str,
        mint: str | None = None,
        statuses: Sequence[TriggerOrderStatus | str] | None = None,
    ) -> list[TriggerOrder]:
        """List a wallet's conditional orders, optionally filtered."""
        query: dict[str, Any] = {"wallet_address": wallet_address}
        if mint:
            query["mint"] = mint
        if statuses:
            query["status"] = [TriggerOrderStatus(s).value for s in statuses]

        raw = await self._rpc.call(GET_TRIGGER_ORDERS_METHOD, [query])
        items = raw.get("orders") if isinstance(raw, dict) else None
        orders = [self._parse_order(item) for item in items or []]

        logger.debug("trigger_orders_fetched", wallet=wallet_address[:8], count=len(orders))
        return orders

    async def cancel(self, order_id: str) -> None:
        """Cancel a conditional order by id."""
        await self._rpc.call(CANCEL_TRIGGER_ORDER_METHOD, [order_id])
        logger.info("trigger_order_cancelled", order_id=order_id)

    @staticmethod
    def _parse_order(raw: Any) -> TriggerOrder:
        try:
            return TriggerOrder.model_validate(raw)
        except PydanticValidationError as e:
            logger.error("trigger_order_parse_failed", error=str(e))
            raise ExternalServiceError(
                service="rpc", message=f"Unreadable trigger order: {e.error_count()} errors"
            ) from e
