"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from crawl_monitor.core.entities import Credentials, RawResult, Source


class BlobStore(ABC):
    """Key-value store of JSON-serializable blobs with synchronous access."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value or None when the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Replace the stored value for ``key``."""
        pass


class ContentProvider(ABC):
    """Interface for a content-acquisition strategy."""

    name: str = "provider"

    @abstractmethod
    def is_available(self, credentials: Credentials) -> bool:
        """Check if the credentials allow this strategy to run."""
        pass

    @abstractmethod
    async def fetch(self, source: Source, credentials: Credentials) -> list[RawResult]:
        """Fetch and summarize the latest update for the source."""
        pass
