"""Shared HTTP plumbing for provider clients."""

import asyncio
from typing import Any

import httpx

from crawl_monitor.config import ProvidersConfig
from crawl_monitor.core import ProviderError


class HTTPProviderClient:
    """POST JSON to a provider with retries on rate limits and server errors.

    Every failure surfaces as :class:`ProviderError` so callers only deal with
    one exception type.
    """

    name = "provider"

    def __init__(self, config: ProvidersConfig) -> None:
        self.timeout = config.request_timeout
        self.max_retries = max(1, config.max_retries)
        self.initial_retry_delay = config.initial_retry_delay
        self.max_retry_delay = config.max_retry_delay

    async def _post_json(self, url: str, headers: dict[str, str], payload: dict[str, Any]) -> dict[str, Any]:
        """POST ``payload`` and return the decoded JSON body."""
        status_code = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, headers=headers, json=payload)
            except httpx.RequestError as e:
                if attempt < self.max_retries - 1:
                    retry_delay = self.initial_retry_delay * (2 ** attempt)
                    print(f"⚠️  {self.name}: network error, retrying after {retry_delay:.1f}s")
                    await asyncio.sleep(retry_delay)
                    continue
                raise ProviderError(self.name, f"{self.name} request failed: {e}") from e

            status_code = response.status_code

            if 200 <= status_code < 300:
                try:
                    data = response.json()
                except ValueError as e:
                    raise ProviderError(self.name, f"{self.name} returned invalid JSON") from e
                if not isinstance(data, dict):
                    raise ProviderError(self.name, f"{self.name} returned an unexpected response")
                return data

            # Rate limit and server errors - retry with backoff
            if (status_code == 429 or status_code >= 500) and attempt < self.max_retries - 1:
                retry_delay = self._get_retry_delay(response, attempt)
                print(f"⏳ {self.name}: HTTP {status_code}, retrying after {retry_delay:.1f}s "
                      f"(attempt {attempt + 1}/{self.max_retries})")
                await asyncio.sleep(retry_delay)
                continue

            raise ProviderError(self.name, self._error_message(response))

        raise ProviderError(self.name, f"{self.name} API error: HTTP {status_code}")

    def _get_retry_delay(self, response: httpx.Response, attempt: int) -> float:
        """Use the Retry-After header when present, exponential backoff otherwise.

        Never waits longer than ``max_retry_delay``.
        """
        delay = self.initial_retry_delay * (2 ** attempt)
        retry_after = response.headers.get("retry-after")
        if retry_after:
            try:
                delay = float(retry_after)
            except ValueError:
                pass

        return min(delay, self.max_retry_delay)

    def _error_message(self, response: httpx.Response) -> str:
        detail = ""
        try:
            body = response.json()
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict):
                detail = str(error.get("message", ""))
            elif error:
                detail = str(error)
            elif isinstance(body, dict) and body.get("detail"):
                detail = str(body["detail"])
        except ValueError:
            detail = (response.text or "")[:200]

        message = f"{self.name} API error: HTTP {response.status_code}"
        return f"{message}: {detail}" if detail else message
