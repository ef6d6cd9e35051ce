"""Content provider adapters."""

from crawl_monitor.adapters.providers.chain import ProviderChain, build_chain
from crawl_monitor.adapters.providers.gemini import GeminiProvider
from crawl_monitor.adapters.providers.openrouter import OpenRouterClient
from crawl_monitor.adapters.providers.search import SearchProvider
from crawl_monitor.adapters.providers.tavily import TavilyClient

__all__ = [
    "ProviderChain",
    "build_chain",
    "GeminiProvider",
    "SearchProvider",
    "TavilyClient",
    "OpenRouterClient",
]
