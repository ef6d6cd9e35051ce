"""Priority-ordered provider selection."""

from crawl_monitor.adapters.providers.gemini import GeminiProvider
from crawl_monitor.adapters.providers.openrouter import OpenRouterClient
from crawl_monitor.adapters.providers.search import SearchProvider
from crawl_monitor.adapters.providers.tavily import TavilyClient
from crawl_monitor.config import Settings
from crawl_monitor.core import (
    ConfigurationError,
    ContentProvider,
    Credentials,
    RawResult,
    Source,
)

NO_CREDENTIAL_MESSAGE = "no valid credential configured"


class ProviderChain:
    """Dispatch a fetch to the first provider the credentials allow.

    The choice is made once per call from credential presence alone. A provider
    failure is raised as is; the next provider in line is never tried.
    """

    def __init__(self, providers: list[ContentProvider]) -> None:
        self.providers = providers

    def select(self, credentials: Credentials) -> ContentProvider:
        for provider in self.providers:
            if provider.is_available(credentials):
                return provider
        raise ConfigurationError(NO_CREDENTIAL_MESSAGE)

    async def fetch(self, source: Source, credentials: Credentials) -> list[RawResult]:
        provider = self.select(credentials)
        return await provider.fetch(source, credentials)


def build_chain(settings: Settings) -> ProviderChain:
    """Gemini first, then Tavily (optionally summarized by OpenRouter)."""
    language = settings.summary_language
    return ProviderChain([
        GeminiProvider(settings.providers, settings.prompts, language),
        SearchProvider(
            TavilyClient(settings.providers),
            OpenRouterClient(settings.providers),
            settings.prompts,
            language,
        ),
    ])
