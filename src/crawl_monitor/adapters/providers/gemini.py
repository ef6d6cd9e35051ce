"""Gemini provider: search-grounded generation in a single request."""

from typing import Any, Optional
from urllib.parse import urlparse

from crawl_monitor.adapters.providers.http import HTTPProviderClient
from crawl_monitor.config import PromptsConfig, ProvidersConfig
from crawl_monitor.core import (
    ContentProvider,
    Credentials,
    ProviderError,
    RawResult,
    Source,
    SourceType,
)
from crawl_monitor.core.parsing import parse_summary

PROVIDER_DOMAIN = "google.com"


def build_prompt(source: Source, prompts: PromptsConfig, language: str) -> str:
    """Pick the instruction template matching the source type."""
    if source.type == SourceType.FACEBOOK:
        template = prompts.facebook
    elif source.type == SourceType.TWITTER:
        template = prompts.twitter
    else:
        template = prompts.website
    return template.format(name=source.name, url=source.url, language=language)


def is_provider_link(uri: str) -> bool:
    host = (urlparse(uri).hostname or "").lower()
    return host == PROVIDER_DOMAIN or host.endswith("." + PROVIDER_DOMAIN)


def extract_text(data: dict[str, Any]) -> str:
    """Join the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def extract_citation(data: dict[str, Any]) -> Optional[str]:
    """First grounding link that does not point back at the provider itself."""
    candidates = data.get("candidates") or []
    if not candidates:
        return None
    chunks = (candidates[0].get("groundingMetadata") or {}).get("groundingChunks") or []
    for chunk in chunks:
        uri = ((chunk or {}).get("web") or {}).get("uri")
        if uri and not is_provider_link(uri):
            return uri
    return None


class GeminiProvider(HTTPProviderClient, ContentProvider):
    """All-in-one strategy: Gemini with the Google Search tool enabled."""

    name = "Gemini"

    def __init__(self, config: ProvidersConfig, prompts: PromptsConfig, language: str) -> None:
        super().__init__(config)
        self.base_url = config.gemini_base_url.rstrip("/")
        self.model = config.gemini_model
        self.temperature = config.gemini_temperature
        self.prompts = prompts
        self.language = language

    def is_available(self, credentials: Credentials) -> bool:
        return bool(credentials.gemini)

    async def fetch(self, source: Source, credentials: Credentials) -> list[RawResult]:
        prompt = build_prompt(source, self.prompts, self.language)

        data = await self._post_json(
            f"{self.base_url}/models/{self.model}:generateContent",
            headers={
                "x-goog-api-key": credentials.gemini,
                "content-type": "application/json",
            },
            payload={
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "tools": [{"google_search": {}}],
                "generationConfig": {"temperature": self.temperature},
            },
        )

        try:
            text = extract_text(data)
            link = extract_citation(data) or source.url
        except (AttributeError, TypeError) as e:
            raise ProviderError(self.name, f"{self.name} returned a malformed response: {e}") from e

        title, summary = parse_summary(text)
        return [RawResult(title=title, summary=summary, original_url=link)]
