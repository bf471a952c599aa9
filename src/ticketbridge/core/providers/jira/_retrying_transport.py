"""httpx async transport that retries transient Jira failures."""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import httpx

_LOG = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})
_MAX_BACKOFF_SECONDS = 8.0


class RetryingTransport(httpx.AsyncBaseTransport):
    """Retries rate-limited (429), gateway (502/503/504) and transport-level failures.

    Waits for ``Retry-After`` when the server sends one, otherwise backs off
    exponentially with jitter. After *max_retries* retries the last response
    is returned (or the last transport error re-raised) unchanged.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError as exc:
                if attempt >= self._max_retries:
                    raise
                _LOG.warning("Jira request %s %s failed (%s); retrying", request.method, request.url.path, exc)
                await self._sleep(self._backoff_seconds(attempt))
                attempt += 1
                continue

            if response.status_code not in _RETRYABLE_STATUS_CODES or attempt >= self._max_retries:
                return response

            await response.aclose()
            delay = self._retry_after_seconds(response)
            if delay is None:
                delay = self._backoff_seconds(attempt)
            _LOG.warning(
                "Jira request %s %s returned %d; retry %d/%d in %.1fs",
                request.method,
                request.url.path,
                response.status_code,
                attempt + 1,
                self._max_retries,
                delay,
            )
            await self._sleep(delay)
            attempt += 1

    async def aclose(self) -> None:
        await self._transport.aclose()

    @staticmethod
    def _retry_after_seconds(response: httpx.Response) -> float | None:
        raw = response.headers.get("Retry-After")
        if raw is None:
            return None
        try:
            return max(0.0, float(raw))
        except ValueError:
            pass
        try:
            when = parsedate_to_datetime(raw)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=UTC)
        return max(0.0, (when - datetime.now(UTC)).total_seconds())

    @staticmethod
    def _backoff_seconds(attempt: int) -> float:
        return min(_MAX_BACKOFF_SECONDS, float(2**attempt)) + random.uniform(0.0, 0.25)

    @staticmethod
    async def _sleep(seconds: float) -> None:
        await asyncio.sleep(seconds)
