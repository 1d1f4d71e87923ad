"""Tests for BaseAPIClient implementation."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from scopetrade.core.exceptions import CircuitBreakerOpenError, ExternalServiceError
from scopetrade.services.base import BaseAPIClient, CircuitState

BASE_URL = "https://rpc.test.local"


class TestBaseAPIClientInit:
    """Tests for BaseAPIClient initialization."""

    def test_default_timeout(self) -> None:
        """
        Given: BaseAPIClient without explicit timeout
        When: Created
        Then: Uses default timeout of 30 seconds
        """
        client = BaseAPIClient(base_url=BASE_URL)
        assert client.timeout == 30.0
        assert client.max_retries == 3

    def test_lazy_initialization(self) -> None:
        """
        Given: BaseAPIClient created
        When: Before first request
        Then: Internal httpx client is None (lazy)
        """
        client = BaseAPIClient(base_url=BASE_URL, headers={"X-Test": "1"})
        assert client._client is None
        assert client.headers == {"X-Test": "1"}


class TestBaseAPIClientClose:
    """Tests for BaseAPIClient close method."""

    @pytest.mark.asyncio
    async def test_close_cleans_up_client(self) -> None:
        """
        Given: BaseAPIClient with active httpx client
        When: close() is called
        Then: Client is closed and set to None
        """
        client = BaseAPIClient(base_url=BASE_URL)
        await client._get_client()
        assert client._client is not None

        await client.close()

        assert client._client is None

    @pytest.mark.asyncio
    async def test_context_manager_closes(self) -> None:
        async with BaseAPIClient(base_url=BASE_URL) as client:
            await client._get_client()
        assert client._client is None


class TestBaseAPIClientRetry:
    """Tests for transport retries."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_on_first_attempt(self) -> None:
        route = respx.post(f"{BASE_URL}/tx/swap").mock(
            return_value=httpx.Response(200, json={"result": {}})
        )
        client = BaseAPIClient(base_url=BASE_URL)

        response = await client.post("/tx/swap", json={})

        assert response.status_code == 200
        assert route.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_on_connect_error_then_success(self) -> None:
        """
        Given: First attempt fails to connect
        When: post() is called
        Then: Retries and returns the second response
        """
        route = respx.post(f"{BASE_URL}/tx/swap").mock(
            side_effect=[
                httpx.ConnectError("connection refused"),
                httpx.Response(200, json={"result": {}}),
            ]
        )
        client = BaseAPIClient(base_url=BASE_URL)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            response = await client.post("/tx/swap", json={})

        assert response.status_code == 200
        assert route.call_count == 2
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_retry_on_400_error(self) -> None:
        """
        Given: Server answers 400
        When: post() is called
        Then: ExternalServiceError raised after a single attempt
        """
        route = respx.post(f"{BASE_URL}/tx/swap").mock(return_value=httpx.Response(400))
        client = BaseAPIClient(base_url=BASE_URL)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.post("/tx/swap", json={})

        assert exc_info.value.status_code == 400
        assert route.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_on_500_until_exhausted(self) -> None:
        route = respx.post(f"{BASE_URL}/tx/swap").mock(return_value=httpx.Response(500))
        client = BaseAPIClient(base_url=BASE_URL, max_retries=3)

        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(ExternalServiceError) as exc_info:
                await client.post("/tx/swap", json={})

        assert route.call_count == 3
        assert exc_info.value.status_code == 500
        assert [c.args[0] for c in sleep.await_args_list] == [1, 2]
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_on_429(self) -> None:
        route = respx.post(f"{BASE_URL}/tx/swap").mock(
            side_effect=[httpx.Response(429), httpx.Response(200, json={"result": 1})]
        )
        client = BaseAPIClient(base_url=BASE_URL)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            response = await client.post("/tx/swap", json={})

        assert response.status_code == 200
        assert route.call_count == 2
        await client.close()


class TestBaseAPIClientCircuitBreaker:
    """Tests for the client's circuit breaker integration."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_circuit_opens_after_threshold(self) -> None:
        """
        Given: Threshold of 2 failures
        When: Two retried failures happen
        Then: The next call is blocked without hitting the network
        """
        route = respx.post(f"{BASE_URL}/tx/swap").mock(return_value=httpx.Response(503))
        client = BaseAPIClient(
            base_url=BASE_URL, max_retries=2, circuit_breaker_threshold=2
        )

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(ExternalServiceError):
                await client.post("/tx/swap", json={})

        assert client._circuit_breaker.state == CircuitState.OPEN

        with pytest.raises(CircuitBreakerOpenError):
            await client.post("/tx/swap", json={})

        assert route.call_count == 2
        await client.close()
