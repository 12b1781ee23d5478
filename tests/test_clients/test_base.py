"""Tests for base async client."""

import httpx
import pytest

from liondine.clients.base import BaseAsyncClient, UpstreamHTTPError


def _client(**kwargs) -> BaseAsyncClient:
    """Client with no backoff delay between retries."""
    return BaseAsyncClient(base_url="https://api.example.com", backoff=0.0, **kwargs)


class TestBaseAsyncClient:
    """Tests for base async HTTP client."""

    @pytest.mark.asyncio
    async def test_context_manager_lifecycle(self, respx_mock):
        """Client should properly initialize and cleanup."""
        respx_mock.get("https://api.example.com/test").mock(
            return_value=httpx.Response(200, text="ok")
        )

        async with BaseAsyncClient(
            base_url="https://api.example.com",
            headers={"User-Agent": "test-agent"},
        ) as client:
            assert client._client is not None
            assert await client.get_text("/test") == "ok"

        # Client should be closed after exiting context
        assert client._client is None

    @pytest.mark.asyncio
    async def test_raises_if_used_without_context_manager(self):
        client = BaseAsyncClient(base_url="https://api.example.com")

        with pytest.raises(RuntimeError, match="not initialized"):
            await client.get_text("/test")

    @pytest.mark.asyncio
    async def test_request_adds_leading_slash(self, respx_mock):
        respx_mock.get("https://api.example.com/page").mock(
            return_value=httpx.Response(200, text="<html>menu</html>")
        )

        async with _client() as client:
            assert await client.get_text("/page") == "<html>menu</html>"
            assert await client.get_text("page") == "<html>menu</html>"

    @pytest.mark.asyncio
    async def test_sends_default_headers(self, respx_mock):
        route = respx_mock.get("https://api.example.com/page").mock(
            return_value=httpx.Response(200, text="ok")
        )

        async with BaseAsyncClient(
            base_url="https://api.example.com", headers={"User-Agent": "menu-bot"}
        ) as client:
            await client.get_text("/page")

        assert route.calls.last.request.headers["User-Agent"] == "menu-bot"

    @pytest.mark.asyncio
    async def test_query_params_forwarded(self, respx_mock):
        route = respx_mock.get("https://api.example.com/page", params={"day": "today"}).mock(
            return_value=httpx.Response(200, text="ok")
        )

        async with _client() as client:
            assert await client.get_text("/page", params={"day": "today"}) == "ok"
        assert route.call_count == 1

    def test_text_only_api(self):
        assert not hasattr(BaseAsyncClient, "get")
        assert not hasattr(BaseAsyncClient, "post")

    @pytest.mark.asyncio
    async def test_handles_http_errors(self, respx_mock):
        """A 404 is not retried."""
        route = respx_mock.get("https://api.example.com/error").mock(
            return_value=httpx.Response(404, text="Not Found")
        )

        async with _client() as client:
            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.get_text("/error")

        assert exc_info.value.status_code == 404
        assert "Not Found" in exc_info.value.response_body
        assert route.call_count == 1



class TestRetryBehavior:
    """Test retry with exponential backoff in _send()."""

    @pytest.mark.asyncio
    async def test_retries_on_429(self, respx_mock):
        route = respx_mock.get("https://api.example.com/rate-limited")
        route.side_effect = [
            httpx.Response(429, text="Too Many Requests"),
            httpx.Response(429, text="Too Many Requests"),
            httpx.Response(200, text="finally"),
        ]

        async with _client() as client:
            assert await client.get_text("/rate-limited") == "finally"
        assert route.call_count == 3

    @pytest.mark.asyncio
    async def test_retries_on_503(self, respx_mock):
        route = respx_mock.get("https://api.example.com/unavailable")
        route.side_effect = [
            httpx.Response(503, text="Service Unavailable"),
            httpx.Response(200, text="recovered"),
        ]

        async with _client() as client:
            assert await client.get_text("/unavailable") == "recovered"
        assert route.call_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, respx_mock):
        route = respx_mock.get("https://api.example.com/down").mock(
            return_value=httpx.Response(502, text="Bad Gateway")
        )

        async with _client(max_retries=2) as client:
            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.get_text("/down")

        assert exc_info.value.status_code == 502
        assert route.call_count == 3

    @pytest.mark.asyncio
    async def test_retries_network_errors(self, respx_mock):
        route = respx_mock.get("https://api.example.com/flaky")
        route.side_effect = [
            httpx.ConnectError("connection refused"),
            httpx.Response(200, text="ok"),
        ]

        async with _client() as client:
            assert await client.get_text("/flaky") == "ok"
        assert route.call_count == 2

    @pytest.mark.asyncio
    async def test_timeout_exhausts_retries(self, respx_mock):
        route = respx_mock.get("https://api.example.com/slow").mock(
            side_effect=httpx.ReadTimeout("timed out")
        )

        async with _client(max_retries=1) as client:
            with pytest.raises(UpstreamHTTPError, match="Request timeout"):
                await client.get_text("/slow")
        assert route.call_count == 2
