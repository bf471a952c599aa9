"""Tests for RetryingTransport - retry, backoff, and Retry-After handling."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from ticketbridge.core.providers.jira._retrying_transport import RetryingTransport

_SLEEP = "ticketbridge.core.providers.jira._retrying_transport.RetryingTransport._sleep"


def _make_response(status_code: int = 200, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status_code=status_code, headers=headers or {})


def _make_request() -> httpx.Request:
    return httpx.Request("GET", "https://example.atlassian.net/rest/api/3/issue/PROJ-1")


class TestConstruction:
    def test_defaults(self) -> None:
        transport = RetryingTransport()
        assert transport._max_retries == 3

    def test_custom_inner_transport(self) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        transport = RetryingTransport(transport=inner, max_retries=5)
        assert transport._transport is inner
        assert transport._max_retries == 5


class TestRetries:
    @pytest.mark.asyncio
    async def test_returns_successful_response(self) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(200)

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 1

    @pytest.mark.asyncio
    @patch(_SLEEP, new_callable=AsyncMock)
    async def test_retries_transport_error_then_succeeds(self, mock_sleep: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [httpx.ConnectError("refused"), _make_response(200)]

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 200
        assert mock_sleep.await_count == 1

    @pytest.mark.asyncio
    @patch(_SLEEP, new_callable=AsyncMock)
    async def test_transport_error_reraised_after_retries(self, mock_sleep: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = httpx.ConnectError("refused")

        with pytest.raises(httpx.ConnectError):
            await RetryingTransport(transport=inner, max_retries=2).handle_async_request(_make_request())

        assert inner.handle_async_request.call_count == 3
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [429, 502, 503, 504])
    @patch(_SLEEP, new_callable=AsyncMock)
    async def test_retries_transient_statuses(self, mock_sleep: AsyncMock, status: int) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [_make_response(status), _make_response(200)]

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 2

    @pytest.mark.asyncio
    @patch(_SLEEP, new_callable=AsyncMock)
    async def test_does_not_retry_client_errors(self, mock_sleep: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(404)

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 404
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @patch(_SLEEP, new_callable=AsyncMock)
    async def test_returns_last_response_when_retries_exhausted(self, mock_sleep: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(503)

        response = await RetryingTransport(transport=inner, max_retries=1).handle_async_request(_make_request())

        assert response.status_code == 503
        assert inner.handle_async_request.call_count == 2

    @pytest.mark.asyncio
    @patch(_SLEEP, new_callable=AsyncMock)
    async def test_honours_retry_after_seconds(self, mock_sleep: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [_make_response(429, {"Retry-After": "7"}), _make_response(200)]

        await RetryingTransport(transport=inner).handle_async_request(_make_request())

        mock_sleep.assert_awaited_once_with(7.0)


class TestHelpers:
    def test_retry_after_absent(self) -> None:
        assert RetryingTransport._retry_after_seconds(_make_response(429)) is None

    def test_retry_after_unparseable(self) -> None:
        assert RetryingTransport._retry_after_seconds(_make_response(429, {"Retry-After": "soon"})) is None

    def test_retry_after_http_date_in_past(self) -> None:
        response = _make_response(429, {"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"})
        assert RetryingTransport._retry_after_seconds(response) == 0.0

    def test_backoff_is_capped(self) -> None:
        assert 8.0 <= RetryingTransport._backoff_seconds(10) <= 8.25
        assert 1.0 <= RetryingTransport._backoff_seconds(0) <= 1.25
