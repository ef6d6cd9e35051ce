"""Core domain layer."""

from crawl_monitor.core.entities import (
    CrawlResult,
    CrawlStatus,
    Credentials,
    RawResult,
    Source,
    SourceType,
)
from crawl_monitor.core.errors import (
    ConfigurationError,
    MonitorError,
    ProviderError,
    SourceBusyError,
)
from crawl_monitor.core.credentials import CredentialsStore
from crawl_monitor.core.interfaces import BlobStore, ContentProvider
from crawl_monitor.core.registry import SourceRegistry
from crawl_monitor.core.result_store import ResultStore

__all__ = [
    "Source",
    "SourceType",
    "CrawlStatus",
    "CrawlResult",
    "RawResult",
    "Credentials",
    "MonitorError",
    "ConfigurationError",
    "ProviderError",
    "SourceBusyError",
    "BlobStore",
    "ContentProvider",
    "SourceRegistry",
    "ResultStore",
    "CredentialsStore",
]
