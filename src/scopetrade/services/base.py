"""Base HTTP client with circuit breaker and transport-level retries.

This module provides:
- CircuitState enum for circuit breaker states
- CircuitBreaker dataclass for tracking consecutive transport failures
- BaseAPIClient, the lazily created httpx client the RPC client builds on

Only connection failures, 429 and 5xx answers are retried here. Application
level faults (an RPC error envelope, a quote without a usable amount) are
never retried; the user re-triggers the operation instead.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import httpx
import structlog

from scopetrade.core.exceptions import CircuitBreakerOpenError, ExternalServiceError

log = structlog.get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Requests allowed
    OPEN = "open"  # Requests blocked
    HALF_OPEN = "half_open"  # One probe request allowed


@dataclass
class CircuitBreaker:
    """Opens after ``failure_threshold`` consecutive transport failures.

    After ``cooldown_seconds`` a single probe request is let through; its
    outcome closes or reopens the circuit.
    """

    failure_threshold: int = 5
    cooldown_seconds: int = 30
    failure_count: int = field(default=0, init=False)
    last_failure_time: datetime | None = field(default=None, init=False)
    state: CircuitState = field(default=CircuitState.CLOSED, init=False)

    def record_success(self) -> None:
        """Reset the failure count and close the circuit."""
        if self.state != CircuitState.CLOSED:
            log.info("circuit_breaker_closed", previous=self.state.value)
        self.failure_count = 0
        self.state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Count a failure, opening the circuit at the threshold."""
        self.failure_count += 1
        self.last_failure_time = datetime.now(UTC)

        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.OPEN
            log.warning("circuit_breaker_reopened", failure_count=self.failure_count)
        elif self.failure_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            log.warning(
                "circuit_breaker_opened",
                failure_count=self.failure_count,
                threshold=self.failure_threshold,
            )

    def can_execute(self) -> bool:
        """Check if a request may be sent, moving OPEN to HALF_OPEN after cooldown."""
        if self.state != CircuitState.OPEN:
            return True
        if self.last_failure_time is None:
            return False

        elapsed = datetime.now(UTC) - self.last_failure_time
        if elapsed > timedelta(seconds=self.cooldown_seconds):
            self.state = CircuitState.HALF_OPEN
            log.info("circuit_breaker_half_open", cooldown_elapsed=elapsed.total_seconds())
            return True
        return False

    def raise_if_open(self) -> None:
        """Raise if the circuit is open and the cooldown has not elapsed.

        Raises:
            CircuitBreakerOpenError: If requests are currently blocked.
        """
        if not self.can_execute():
            raise CircuitBreakerOpenError(
                f"Circuit breaker is open. Next retry in "
                f"{self.seconds_until_half_open():.1f} seconds."
            )

    def seconds_until_half_open(self) -> float:
        """Seconds remaining before a probe request is allowed."""
        if self.last_failure_time is None:
            return 0.0
        elapsed = datetime.now(UTC) - self.last_failure_time
        return max(0.0, self.cooldown_seconds - elapsed.total_seconds())


class BaseAPIClient:
    """Lazily created httpx client with circuit breaker and bounded retries.

    Example:
        client = BaseAPIClient(base_url="https://api.example.com")
        response = await client.post("/tx/getSwapQuote", json={...})
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        circuit_breaker_threshold: int = 5,
        circuit_breaker_cooldown: int = 30,
        max_retries: int = 3,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self.max_retries = max_retries
        self._client: httpx.AsyncClient | None = None
        self._circuit_breaker = CircuitBreaker(
            failure_threshold=circuit_breaker_threshold,
            cooldown_seconds=circuit_breaker_cooldown,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
            log.debug("httpx_client_created", base_url=self.base_url)
        return self._client

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", base_url=self.base_url)

    async def __aenter__(self) -> "BaseAPIClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying transport failures with backoff.

        Raises:
            CircuitBreakerOpenError: If the circuit breaker is open.
            ExternalServiceError: On a 4xx answer, or once retries are exhausted.
        """
        self._circuit_breaker.raise_if_open()

        client = await self._get_client()
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                self._circuit_breaker.record_success()
                return response

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code

                # 4xx (except 429) is the caller's problem, no retry
                if 400 <= status_code < 500 and status_code != 429:
                    log.warning(
                        "request_client_error",
                        path=path,
                        status_code=status_code,
                    )
                    raise ExternalServiceError(
                        service=self.base_url,
                        message=f"HTTP {status_code}",
                        status_code=status_code,
                    ) from e

                self._circuit_breaker.record_failure()
                last_error = e
                log.warning(
                    "request_server_error",
                    path=path,
                    status_code=status_code,
                    attempt=attempt + 1,
                )

            except httpx.RequestError as e:
                self._circuit_breaker.record_failure()
                last_error = e
                log.warning(
                    "request_connection_error",
                    path=path,
                    error=str(e),
                    attempt=attempt + 1,
                )

            # Exponential backoff: 1s, 2s, 4s (capped)
            if attempt < self.max_retries - 1:
                await asyncio.sleep(min(2**attempt, 4))

        log.error("request_max_retries_exceeded", path=path, max_retries=self.max_retries)
        status_code = (
            last_error.response.status_code
            if isinstance(last_error, httpx.HTTPStatusError)
            else None
        )
        raise ExternalServiceError(
            service=self.base_url,
            message=f"Max retries ({self.max_retries}) exceeded: {last_error}",
            status_code=status_code,
        )

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return await self._request("POST", path, **kwargs)
