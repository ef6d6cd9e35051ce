"""Tests for the Gemini provider."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from crawl_monitor.adapters.providers import GeminiProvider
from crawl_monitor.adapters.providers.gemini import build_prompt, extract_citation
from crawl_monitor.config import PromptsConfig, ProvidersConfig
from crawl_monitor.core import Credentials, ProviderError, Source, SourceType
from crawl_monitor.core.parsing import PLACEHOLDER_TITLE


@pytest.fixture
def provider() -> GeminiProvider:
    config = ProvidersConfig(max_retries=2, initial_retry_delay=0.01)
    return GeminiProvider(config, PromptsConfig(), "English")


@pytest.fixture
def source() -> Source:
    return Source(
        id="s1",
        name="Tech",
        url="https://tech.example",
        type=SourceType.WEBSITE,
        interval_hours=2,
        next_check=datetime.now(timezone.utc),
    )


def gemini_response(text: str, uris: list[str]) -> dict:
    return {
        "candidates": [{
            "content": {"parts": [{"text": text}]},
            "groundingMetadata": {
                "groundingChunks": [{"web": {"uri": uri, "title": "t"}} for uri in uris],
            },
        }]
    }


def mock_http(mock_client_class: MagicMock, *responses: MagicMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client.post.side_effect = list(responses)
    mock_client_class.return_value = mock_client
    return mock_client


def ok(data: dict) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = data
    return response


@pytest.mark.asyncio
async def test_fetch_title_summary_and_citation(provider: GeminiProvider, source: Source) -> None:
    """Grounded answer is split into title and summary, citation becomes the link."""
    data = gemini_response(
        "Big Launch\nCompany X announced...",
        ["https://www.google.com/search?q=x", "https://tech.example/article"],
    )

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, ok(data))

        [result] = await provider.fetch(source, Credentials(gemini="KEY1"))

    assert result.title == "Big Launch"
    assert result.summary == "Company X announced..."
    assert result.original_url == "https://tech.example/article"

    call = mock_client.post.call_args
    assert call.args[0].endswith("/models/gemini-2.5-flash:generateContent")
    assert call.kwargs["headers"]["x-goog-api-key"] == "KEY1"
    payload = call.kwargs["json"]
    assert payload["tools"] == [{"google_search": {}}]
    assert payload["generationConfig"]["temperature"] == 0.3
    prompt = payload["contents"][0]["parts"][0]["text"]
    assert '"Tech" (https://tech.example)' in prompt
    assert "English" in prompt


@pytest.mark.asyncio
async def test_fetch_without_citation_uses_source_url(provider: GeminiProvider, source: Source) -> None:
    data = gemini_response("Headline\nBody", ["https://vertexaisearch.cloud.google.com/redirect/abc"])

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http(mock_client_class, ok(data))

        [result] = await provider.fetch(source, Credentials(gemini="KEY1"))

    assert result.original_url == "https://tech.example"


@pytest.mark.asyncio
async def test_fetch_empty_candidates_degrades(provider: GeminiProvider, source: Source) -> None:
    """No text is not an error: a placeholder result is returned."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http(mock_client_class, ok({"candidates": []}))

        [result] = await provider.fetch(source, Credentials(gemini="KEY1"))

    assert result.title == PLACEHOLDER_TITLE
    assert result.original_url == source.url


@pytest.mark.asyncio
async def test_fetch_http_error_raises_provider_error(provider: GeminiProvider, source: Source) -> None:
    error = MagicMock()
    error.status_code = 400
    error.json.return_value = {"error": {"message": "API key not valid"}}

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, error)

        with pytest.raises(ProviderError, match="API key not valid"):
            await provider.fetch(source, Credentials(gemini="BAD"))

    assert mock_client.post.call_count == 1


@pytest.mark.asyncio
async def test_fetch_retries_on_503(provider: GeminiProvider, source: Source) -> None:
    busy = MagicMock()
    busy.status_code = 503
    busy.headers = {}

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, busy, ok(gemini_response("A\nB", [])))

        [result] = await provider.fetch(source, Credentials(gemini="KEY1"))

    assert result.title == "A"
    assert mock_client.post.call_count == 2


def test_build_prompt_depends_on_source_type(source: Source) -> None:
    prompts = PromptsConfig()

    source.type = SourceType.FACEBOOK
    assert "Facebook page" in build_prompt(source, prompts, "English")

    source.type = SourceType.TWITTER
    assert "Twitter / X account" in build_prompt(source, prompts, "English")

    source.type = SourceType.OTHER
    assert "website" in build_prompt(source, prompts, "English")


def test_extract_citation_skips_provider_domain() -> None:
    data = gemini_response("x", ["https://google.com/a", "https://news.google.com/b"])

    assert extract_citation(data) is None
    assert extract_citation({"candidates": [{"content": {}}]}) is None
