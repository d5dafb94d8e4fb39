"""Base async HTTP client with connection pooling and opt-in retries.

API clients inherit from this base to get consistent behavior:
- Async/await for non-blocking I/O
- One pooled connection set per context-manager block
- Optional retries with exponential backoff on transient failures
- Redirects followed; any other non-2xx response is a failure
- Every failure surfaced as UpstreamRequestError

Usage:
    class MyAPIClient(BaseAsyncClient):
        def __init__(self, api_key: str):
            super().__init__(
                base_url="https://api.example.com",
                headers={"Authorization": f"Bearer {api_key}"},
            )

        async def get_data(self, symbol: str) -> dict:
            return await self._request("GET", f"/data/{symbol}")
"""

import asyncio
import logging
from typing import Any

import httpx

from sportslake.errors import UpstreamRequestError


logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 502, 503, 504}
_BASE_BACKOFF = 1.0  # seconds


class BaseAsyncClient:
    """Base async HTTP client.

    Args:
        base_url: Base URL for all API requests
        headers: Default headers for all requests
        timeout: Request timeout in seconds (default: 30)
        max_retries: Retries on transient failures (default: 0, fail fast)
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        max_retries: int = 0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout = timeout
        self.max_retries = max_retries
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BaseAsyncClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=2, max_connections=4),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make an HTTP request and return the parsed JSON body.

        Transient failures (429, 502, 503, 504, timeouts, network errors)
        are retried with exponential backoff only while attempts remain
        under max_retries. Everything else raises immediately.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path (relative to base_url)
            params: Query parameters

        Returns:
            Parsed JSON response, unchanged

        Raises:
            UpstreamRequestError: If the request fails
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with context manager.")

        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"

        attempts = self.max_retries + 1

        for attempt in range(attempts):
            logger.debug(
                "%s %s%s (attempt %d/%d)",
                method, self.base_url, endpoint, attempt + 1, attempts,
            )

            try:
                response = await self._client.request(method=method, url=endpoint, params=params)
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                if attempt < self.max_retries:
                    await self._backoff(endpoint, attempt, f"{type(e).__name__}")
                    continue
                logger.error("Request to %s failed: %s", endpoint, e)
                raise UpstreamRequestError(f"Request to {endpoint} failed: {e}") from e
            except httpx.HTTPError as e:
                logger.error("Unexpected HTTP error for %s: %s", endpoint, e)
                raise UpstreamRequestError(f"Unexpected error: {e}") from e

            logger.debug("Response: %d for %s", response.status_code, endpoint)

            if not response.is_success:
                error_body = response.text[:500]
                if response.status_code in _RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                    await self._backoff(endpoint, attempt, str(response.status_code))
                    continue

                logger.error("API error: %d %s - %s", response.status_code, endpoint, error_body)
                raise UpstreamRequestError(
                    message=f"API request failed: {response.status_code}",
                    status_code=response.status_code,
                    response_body=error_body,
                )

            try:
                return response.json()
            except ValueError as e:
                logger.error("Failed to parse JSON response: %s", e)
                raise UpstreamRequestError(
                    message=f"Invalid JSON response: {e}",
                    status_code=response.status_code,
                    response_body=response.text[:500],
                ) from e

        # Unreachable: the final attempt always returns or raises
        raise UpstreamRequestError("Request failed after retries")

    async def _backoff(self, endpoint: str, attempt: int, reason: str) -> None:
        backoff = _BASE_BACKOFF * (2 ** attempt)
        logger.warning(
            "Retryable %s for %s, retrying in %.1fs (attempt %d/%d)",
            reason, endpoint, backoff, attempt + 1, self.max_retries + 1,
        )
        await asyncio.sleep(backoff)

    async def get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Convenience method for GET requests."""
        return await self._request("GET", endpoint, params=params)
