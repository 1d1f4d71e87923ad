"""RPC client for the pricing and execution service.

Each call is a POST to ``{api_host}/{method}`` with a JSON body
``{"method": ..., "params": [...]}``. The service answers with either a
``result`` or an ``error`` envelope.

The client extends BaseAPIClient to inherit:
- Transport retries with exponential backoff
- Circuit breaker pattern for failure protection
- Lazy httpx client creation and cleanup
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from scopetrade.config.settings import Settings, get_settings
from scopetrade.core.exceptions import RpcError
from scopetrade.services.base import BaseAPIClient

log = structlog.get_logger(__name__)

# Error code the service uses for "session expired / not authenticated"
AUTH_REQUIRED_CODE = -32600

AuthFailureHandler = Callable[[], Awaitable[bool]]


class RpcClient(BaseAPIClient):
    """Client for the trading RPC service.

    Attributes:
        base_url: Service host taken from settings.

    Example:
        client = RpcClient()
        quote = await client.call("tx/getSwapQuote", [...])
        await client.close()
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        super().__init__(
            base_url=settings.api_host,
            timeout=settings.rpc_timeout_seconds,
            headers={"Content-Type": "application/json"},
            circuit_breaker_threshold=settings.circuit_breaker_threshold,
            circuit_breaker_cooldown=settings.circuit_breaker_cooldown,
        )
        self._on_auth_failure: AuthFailureHandler | None = None
        self._refresh_task: asyncio.Task[bool] | None = None

    def set_auth_failure_handler(self, handler: AuthFailureHandler | None) -> None:
        """Register the session refresh used when a call hits AUTH_REQUIRED_CODE.

        The handler returns True when the session was refreshed and the call
        may be retried.
        """
        self._on_auth_failure = handler

    async def call(self, method: str, params: list[Any]) -> Any:
        """Perform an RPC call and return its ``result``.

        Raises:
            RpcError: If the service returns an error envelope or no result.
            ExternalServiceError: If the HTTP request itself fails.
            CircuitBreakerOpenError: If the circuit breaker is open.
        """
        return await self._call(method, params, retry_depth=0)

    async def _call(self, method: str, params: list[Any], retry_depth: int) -> Any:
        log.debug("rpc_call", method=method, retry_depth=retry_depth)

        response = await self.post(f"/{method}", json={"method": method, "params": params})
        body = response.json()

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            code = int(error.get("code", -1))
            message = str(error.get("message", "unknown error"))

            if (
                code == AUTH_REQUIRED_CODE
                and self._on_auth_failure is not None
                and retry_depth < 1
                and not method.startswith("auth/")
            ):
                if await self._refresh_session(method):
                    log.info("rpc_retry_after_refresh", method=method)
                    return await self._call(method, params, retry_depth + 1)

            log.warning("rpc_error", method=method, code=code, message=message)
            raise RpcError(code, message)

        if not isinstance(body, dict) or "result" not in body:
            log.warning("rpc_missing_result", method=method)
            raise RpcError(-1, "RPC response missing result")

        return body["result"]

    async def _refresh_session(self, method: str) -> bool:
        """Run the auth refresh once, letting concurrent callers join it."""
        if self._refresh_task is None:
            log.info("rpc_session_refresh_started", method=method)
            self._refresh_task = asyncio.ensure_future(self._run_refresh())
        else:
            log.debug("rpc_session_refresh_joined", method=method)

        return await asyncio.shield(self._refresh_task)

    async def _run_refresh(self) -> bool:
        assert self._on_auth_failure is not None
        try:
            return await self._on_auth_failure()
        except Exception as e:
            # A failed refresh falls back to the original auth error
            log.warning("rpc_session_refresh_failed", error=str(e))
            return False
        finally:
            self._refresh_task = None


# Singleton
_rpc_client: RpcClient | None = None


def get_rpc_client() -> RpcClient:
    """Get or create the RPC client singleton."""
    global _rpc_client
    if _rpc_client is None:
        _rpc_client = RpcClient()
    return _rpc_client
