"""Search strategy: Tavily retrieval with optional OpenRouter summarization."""

from crawl_monitor.adapters.providers.openrouter import OpenRouterClient
from crawl_monitor.adapters.providers.tavily import SearchResponse, TavilyClient
from crawl_monitor.config import PromptsConfig
from crawl_monitor.core import ContentProvider, Credentials, ProviderError, RawResult, Source
from crawl_monitor.core.parsing import (
    EMPTY_RESPONSE_TEXT,
    PLACEHOLDER_TITLE,
    parse_summary,
    truncate,
)

SNIPPET_LIMIT = 200


def build_context(response: SearchResponse) -> str:
    """Flatten search results and the auto-answer into one text block."""
    blocks = []
    for hit in response.results:
        blocks.append(f"Title: {hit.title}\nContent: {hit.content}\nURL: {hit.url}")
    if response.answer:
        blocks.append(f"Answer: {response.answer}")
    return "\n\n".join(blocks)


class SearchProvider(ContentProvider):
    """Search the web for the source, then summarize what was found."""

    name = "Tavily"

    def __init__(
        self,
        search_client: TavilyClient,
        summarizer: OpenRouterClient,
        prompts: PromptsConfig,
        language: str,
    ) -> None:
        self.search_client = search_client
        self.summarizer = summarizer
        self.prompts = prompts
        self.language = language

    def is_available(self, credentials: Credentials) -> bool:
        return bool(credentials.tavily)

    async def fetch(self, source: Source, credentials: Credentials) -> list[RawResult]:
        query = self.prompts.search_query.format(name=source.name, url=source.url)
        response = await self.search_client.search(query, credentials.tavily)

        first = response.results[0] if response.results else None
        link = (first.url if first else "") or source.url
        fallback_title = (first.title if first else "") or PLACEHOLDER_TITLE

        if credentials.openrouter:
            context = build_context(response)
            if not context:
                return [RawResult(title=PLACEHOLDER_TITLE, summary=EMPTY_RESPONSE_TEXT, original_url=link)]

            try:
                text = await self.summarizer.summarize(
                    system=self.prompts.summarizer_system.format(language=self.language),
                    user=self.prompts.summarizer_user.format(
                        name=source.name, url=source.url, context=context
                    ),
                    api_key=credentials.openrouter,
                )
            except ProviderError as e:
                print(f"⚠️  Summarizer failed for {source.name}, keeping raw search context: {e}")
                return [RawResult(title=fallback_title, summary=context, original_url=link)]

            title, summary = parse_summary(text)
            return [RawResult(title=title, summary=summary, original_url=link)]

        if response.answer:
            summary = response.answer
        else:
            raw = "\n".join(hit.content for hit in response.results if hit.content)
            summary = truncate(raw, SNIPPET_LIMIT) or EMPTY_RESPONSE_TEXT

        return [RawResult(title=fallback_title, summary=summary, original_url=link)]
