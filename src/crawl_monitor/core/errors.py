"""Domain errors."""


class MonitorError(Exception):
    """Base class for crawl monitor errors."""


class ConfigurationError(MonitorError):
    """No usable provider credential is configured."""


class ProviderError(MonitorError):
    """A content provider call failed (network, HTTP status or malformed body)."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class SourceBusyError(MonitorError):
    """The source already has a crawl in flight."""
