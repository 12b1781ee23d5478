"""Base async HTTP client with bounded timeouts and transient-error retries.

Upstream clients inherit from this base so every network call the service
makes behaves the same way:
- Async/await for non-blocking I/O
- A hard per-request timeout so a hung upstream cannot stall a request
- Retries with exponential backoff on 429/5xx gateway errors and network faults
- One error type (UpstreamHTTPError) for every failure

Usage:
    class MyClient(BaseAsyncClient):
        def __init__(self):
            super().__init__(base_url="https://example.com")

        async def get_page(self, path: str) -> str:
            return await self.get_text(path)
"""

import asyncio
import logging
from typing import Any

import httpx


logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 502, 503, 504}
_MAX_RETRIES = 2
_BASE_BACKOFF = 0.5  # seconds


class UpstreamHTTPError(Exception):
    """An upstream HTTP call failed after all retries."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class BaseAsyncClient:
    """Base async HTTP client.

    Args:
        base_url: Base URL for all requests
        headers: Default headers for all requests
        timeout: Request timeout in seconds (default: 30)
        max_retries: Extra attempts on transient failures (default: 2)
        backoff: Initial backoff in seconds, doubled per attempt
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        max_retries: int = _MAX_RETRIES,
        backoff: float = _BASE_BACKOFF,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BaseAsyncClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _send(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Returns:
            The first response with a status code below 400

        Raises:
            UpstreamHTTPError: On a non-retryable status, or when retries run out
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with context manager.")

        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"

        last_error: UpstreamHTTPError | None = None

        for attempt in range(self.max_retries + 1):
            logger.debug(
                "%s %s%s (attempt %d/%d)",
                method, self.base_url, endpoint, attempt + 1, self.max_retries + 1,
            )
            retry_reason: str | None = None

            try:
                response = await self._client.request(
                    method=method,
                    url=endpoint,
                    params=params,
                )
            except httpx.TimeoutException as e:
                last_error = UpstreamHTTPError(f"Request timeout: {e}")
                retry_reason = "Timeout"
            except httpx.TransportError as e:
                last_error = UpstreamHTTPError(f"Network error: {e}")
                retry_reason = "Network error"
            else:
                logger.debug("Response: %d for %s", response.status_code, endpoint)
                if response.status_code < 400:
                    return response

                last_error = UpstreamHTTPError(
                    message=f"Upstream request failed: {response.status_code}",
                    status_code=response.status_code,
                    response_body=response.text[:500],
                )
                if response.status_code in _RETRYABLE_STATUS_CODES:
                    retry_reason = f"Retryable {response.status_code}"
                else:
                    logger.error(
                        "Upstream error: %d %s - %s",
                        response.status_code, endpoint, last_error.response_body,
                    )
                    raise last_error

            if attempt < self.max_retries:
                delay = self.backoff * (2 ** attempt)
                logger.warning(
                    "%s for %s, retrying in %.1fs (attempt %d/%d)",
                    retry_reason, endpoint, delay, attempt + 1, self.max_retries + 1,
                )
                await asyncio.sleep(delay)

        logger.error("%s for %s, giving up", retry_reason, endpoint)
        raise last_error or UpstreamHTTPError("Request failed after retries")

    async def get_text(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> str:
        """GET ``endpoint`` and return the decoded body."""
        response = await self._send("GET", endpoint, params=params)
        return response.text
