"""Tests for base async client."""

from unittest.mock import patch

import httpx
import pytest

from sportslake.clients.base import BaseAsyncClient
from sportslake.errors import UpstreamRequestError


class TestBaseAsyncClient:
    """Tests for base async HTTP client."""

    @pytest.mark.asyncio
    async def test_context_manager_lifecycle(self, respx_mock):
        """Client should properly initialize and cleanup."""
        respx_mock.get("https://api.example.com/test").mock(
            return_value=httpx.Response(200, json={"status": "ok"})
        )

        async with BaseAsyncClient(
            base_url="https://api.example.com",
            headers={"Authorization": "test_key"},
        ) as client:
            assert client._client is not None
            result = await client.get("/test")
            assert result == {"status": "ok"}

        assert client._client is None

    @pytest.mark.asyncio
    async def test_client_can_be_reopened(self, respx_mock):
        """The same instance can be entered again after exiting."""
        respx_mock.get("https://api.example.com/test").mock(
            return_value=httpx.Response(200, json=[1, 2])
        )
        client = BaseAsyncClient(base_url="https://api.example.com")

        async with client:
            assert await client.get("/test") == [1, 2]
        async with client:
            assert await client.get("/test") == [1, 2]

    @pytest.mark.asyncio
    async def test_raises_if_used_without_context_manager(self):
        """Client should raise if used without async with."""
        client = BaseAsyncClient(base_url="https://api.example.com")

        with pytest.raises(RuntimeError, match="not initialized"):
            await client.get("/test")

    @pytest.mark.asyncio
    async def test_request_adds_leading_slash(self, respx_mock):
        """Requests should work with or without leading slash."""
        respx_mock.get("https://api.example.com/test").mock(
            return_value=httpx.Response(200, json={"data": "value"})
        )

        async with BaseAsyncClient(base_url="https://api.example.com/") as client:
            assert await client.get("/test") == {"data": "value"}
            assert await client.get("test") == {"data": "value"}

    @pytest.mark.asyncio
    async def test_handles_http_errors(self, respx_mock):
        """Client should raise UpstreamRequestError on HTTP errors."""
        respx_mock.get("https://api.example.com/error").mock(
            return_value=httpx.Response(404, text="Not Found")
        )

        async with BaseAsyncClient(base_url="https://api.example.com") as client:
            with pytest.raises(UpstreamRequestError) as exc_info:
                await client.get("/error")

            assert exc_info.value.status_code == 404
            assert "Not Found" in exc_info.value.response_body

    @pytest.mark.asyncio
    async def test_handles_invalid_json(self, respx_mock):
        """Client should raise UpstreamRequestError on invalid JSON."""
        respx_mock.get("https://api.example.com/invalid").mock(
            return_value=httpx.Response(200, text="not json")
        )

        async with BaseAsyncClient(base_url="https://api.example.com") as client:
            with pytest.raises(UpstreamRequestError, match="Invalid JSON"):
                await client.get("/invalid")


class TestRetryBehavior:
    """Retries are off by default and opt-in via max_retries."""

    @pytest.mark.asyncio
    async def test_no_retry_by_default(self, respx_mock):
        """A 503 fails immediately when max_retries is 0."""
        route = respx_mock.get("https://api.example.com/unavailable")
        route.mock(return_value=httpx.Response(503, text="Service Unavailable"))

        async with BaseAsyncClient(base_url="https://api.example.com") as client:
            with pytest.raises(UpstreamRequestError) as exc_info:
                await client.get("/unavailable")

        assert exc_info.value.status_code == 503
        assert route.call_count == 1

    @pytest.mark.asyncio
    async def test_network_error_not_retried_by_default(self, respx_mock):
        """Connection failures raise UpstreamRequestError on the first attempt."""
        route = respx_mock.get("https://api.example.com/down")
        route.side_effect = httpx.ConnectError("connection refused")

        async with BaseAsyncClient(base_url="https://api.example.com") as client:
            with pytest.raises(UpstreamRequestError, match="connection refused"):
                await client.get("/down")

        assert route.call_count == 1

    @pytest.mark.asyncio
    @patch("sportslake.clients.base._BASE_BACKOFF", 0.0)
    async def test_retries_on_429_when_enabled(self, respx_mock):
        """Client retries on 429 Too Many Requests when configured to."""
        route = respx_mock.get("https://api.example.com/rate-limited")
        route.side_effect = [
            httpx.Response(429, text="Too Many Requests"),
            httpx.Response(429, text="Too Many Requests"),
            httpx.Response(200, json={"ok": True}),
        ]

        async with BaseAsyncClient(base_url="https://api.example.com", max_retries=3) as client:
            result = await client.get("/rate-limited")

        assert result == {"ok": True}
        assert route.call_count == 3

    @pytest.mark.asyncio
    @patch("sportslake.clients.base._BASE_BACKOFF", 0.0)
    async def test_no_retry_on_404(self, respx_mock):
        """Client does NOT retry on 404 Not Found."""
        route = respx_mock.get("https://api.example.com/missing")
        route.mock(return_value=httpx.Response(404, text="Not Found"))

        async with BaseAsyncClient(base_url="https://api.example.com", max_retries=3) as client:
            with pytest.raises(UpstreamRequestError):
                await client.get("/missing")

        assert route.call_count == 1

    @pytest.mark.asyncio
    @patch("sportslake.clients.base._BASE_BACKOFF", 0.0)
    async def test_exhausts_retries(self, respx_mock):
        """Client raises after exhausting all retries."""
        route = respx_mock.get("https://api.example.com/always-fail")
        route.mock(return_value=httpx.Response(503, text="Down"))

        async with BaseAsyncClient(base_url="https://api.example.com", max_retries=2) as client:
            with pytest.raises(UpstreamRequestError) as exc_info:
                await client.get("/always-fail")

        assert exc_info.value.status_code == 503
        # 1 initial + 2 retries
        assert route.call_count == 3

    @pytest.mark.asyncio
    @patch("sportslake.clients.base._BASE_BACKOFF", 0.0)
    async def test_retries_on_timeout(self, respx_mock):
        """Client retries on timeout exceptions."""
        route = respx_mock.get("https://api.example.com/slow")
        route.side_effect = [
            httpx.ReadTimeout("Connection timed out"),
            httpx.Response(200, json={"slow_but_ok": True}),
        ]

        async with BaseAsyncClient(base_url="https://api.example.com", max_retries=1) as client:
            result = await client.get("/slow")

        assert result == {"slow_but_ok": True}
