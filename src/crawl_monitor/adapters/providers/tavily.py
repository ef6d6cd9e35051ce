"""Tavily search API client."""

from dataclasses import dataclass, field
from typing import Optional

from crawl_monitor.adapters.providers.http import HTTPProviderClient
from crawl_monitor.config import ProvidersConfig
from crawl_monitor.core import ProviderError


@dataclass
class SearchHit:
    """One search result."""

    title: str
    content: str
    url: str


@dataclass
class SearchResponse:
    """Synthesized answer plus ordered search results."""

    answer: Optional[str] = None
    results: list[SearchHit] = field(default_factory=list)


class TavilyClient(HTTPProviderClient):
    """Run web searches with an auto-generated answer."""

    name = "Tavily"

    def __init__(self, config: ProvidersConfig) -> None:
        super().__init__(config)
        self.base_url = config.tavily_base_url.rstrip("/")
        self.max_results = config.tavily_max_results
        self.search_depth = config.tavily_search_depth

    async def search(self, query: str, api_key: str) -> SearchResponse:
        data = await self._post_json(
            f"{self.base_url}/search",
            headers={
                "Authorization": f"Bearer {api_key}",
                "content-type": "application/json",
            },
            payload={
                "query": query,
                "search_depth": self.search_depth,
                "max_results": self.max_results,
                "include_answer": True,
            },
        )

        try:
            hits = [
                SearchHit(
                    title=str(r.get("title") or ""),
                    content=str(r.get("content") or ""),
                    url=str(r.get("url") or ""),
                )
                for r in data.get("results") or []
            ]
        except AttributeError as e:
            raise ProviderError(self.name, f"{self.name} returned a malformed response: {e}") from e

        answer = data.get("answer")
        return SearchResponse(answer=str(answer) if answer else None, results=hits)
