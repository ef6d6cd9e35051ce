"""Tests for the shared provider HTTP client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from crawl_monitor.adapters.providers.http import HTTPProviderClient
from crawl_monitor.config import ProvidersConfig
from crawl_monitor.core import ProviderError


@pytest.fixture
def client() -> HTTPProviderClient:
    return HTTPProviderClient(ProvidersConfig(max_retries=3, initial_retry_delay=0.01))


def response(status_code: int, data=None, headers=None) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.headers = headers or {}
    if isinstance(data, Exception):
        mock_response.json.side_effect = data
        mock_response.text = "<html>Bad Gateway</html>"
    else:
        mock_response.json.return_value = data
    return mock_response


def patched(mock_client_class: MagicMock, side_effect) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client.post.side_effect = side_effect
    mock_client_class.return_value = mock_client
    return mock_client


@pytest.mark.asyncio
async def test_retry_on_429_honors_retry_after(client: HTTPProviderClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class, \
            patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        mock_client = patched(mock_client_class, [
            response(429, headers={"retry-after": "3"}),
            response(200, {"ok": True}),
        ])

        data = await client._post_json("https://api.example/x", {}, {})

    assert data == {"ok": True}
    assert mock_client.post.call_count == 2
    mock_sleep.assert_awaited_once_with(3.0)


@pytest.mark.asyncio
async def test_retry_after_is_capped() -> None:
    client = HTTPProviderClient(ProvidersConfig(max_retries=2, max_retry_delay=30.0))

    with patch("httpx.AsyncClient") as mock_client_class, \
            patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        patched(mock_client_class, [
            response(503, headers={"retry-after": "3600"}),
            response(200, {"ok": True}),
        ])

        data = await client._post_json("https://api.example/x", {}, {})

    assert data == {"ok": True}
    mock_sleep.assert_awaited_once_with(30.0)


@pytest.mark.asyncio
async def test_gives_up_after_max_retries(client: HTTPProviderClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = patched(mock_client_class, [
            response(500, {"error": "boom"}),
            response(500, {"error": "boom"}),
            response(502, ValueError("not json")),
        ])

        with pytest.raises(ProviderError, match="HTTP 502: <html>Bad Gateway</html>"):
            await client._post_json("https://api.example/x", {}, {})

    assert mock_client.post.call_count == 3


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(client: HTTPProviderClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = patched(mock_client_class, [response(401, {"detail": "Unauthorized"})])

        with pytest.raises(ProviderError, match="HTTP 401: Unauthorized"):
            await client._post_json("https://api.example/x", {}, {})

    assert mock_client.post.call_count == 1


@pytest.mark.asyncio
async def test_network_error_becomes_provider_error(client: HTTPProviderClient) -> None:
    error = httpx.ConnectError("connection refused")

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = patched(mock_client_class, [error, error, error])

        with pytest.raises(ProviderError, match="connection refused"):
            await client._post_json("https://api.example/x", {}, {})

    assert mock_client.post.call_count == 3


@pytest.mark.asyncio
async def test_invalid_json_body(client: HTTPProviderClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        patched(mock_client_class, [response(200, ValueError("not json"))])

        with pytest.raises(ProviderError, match="invalid JSON"):
            await client._post_json("https://api.example/x", {}, {})


@pytest.mark.asyncio
async def test_non_object_body(client: HTTPProviderClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        patched(mock_client_class, [response(200, ["not", "an", "object"])])

        with pytest.raises(ProviderError, match="unexpected response"):
            await client._post_json("https://api.example/x", {}, {})
