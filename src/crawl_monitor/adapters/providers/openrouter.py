"""OpenRouter chat completions client used as a summarizer."""

from crawl_monitor.adapters.providers.http import HTTPProviderClient
from crawl_monitor.config import ProvidersConfig
from crawl_monitor.core import ProviderError


class OpenRouterClient(HTTPProviderClient):
    """Summarize a block of context with a chat model."""

    name = "OpenRouter"

    def __init__(self, config: ProvidersConfig) -> None:
        super().__init__(config)
        self.base_url = config.openrouter_base_url.rstrip("/")
        self.model = config.openrouter_model

    async def summarize(self, system: str, user: str, api_key: str) -> str:
        data = await self._post_json(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {api_key}",
                "content-type": "application/json",
            },
            payload={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            },
        )

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, f"{self.name} returned a malformed response") from e

        return content or ""
