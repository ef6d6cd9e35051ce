"""Persistent provider credentials."""

from typing import Optional

from crawl_monitor.core.entities import Credentials
from crawl_monitor.core.interfaces import BlobStore

CREDENTIALS_KEY = "credentials"
LEGACY_GEMINI_KEY = "gemini_api_key"


class CredentialsStore:
    """Read credentials from the blob store and write them back on every change.

    Reads always go to the store, so keys saved from another shell reach a
    running scheduler on its next tick.
    """

    def __init__(self, blob_store: BlobStore, defaults: Optional[Credentials] = None) -> None:
        self.blob_store = blob_store
        self.defaults = defaults or Credentials()

    @property
    def credentials(self) -> Credentials:
        data = self.blob_store.get(CREDENTIALS_KEY)
        if data is not None:
            return Credentials.from_dict(data)

        # Older data directories only kept a bare Gemini key
        legacy = self.blob_store.get(LEGACY_GEMINI_KEY)
        if legacy:
            return Credentials(
                gemini=str(legacy),
                tavily=self.defaults.tavily,
                openrouter=self.defaults.openrouter,
            )
        return Credentials(**self.defaults.to_dict())

    def update(
        self,
        gemini: Optional[str] = None,
        tavily: Optional[str] = None,
        openrouter: Optional[str] = None,
    ) -> Credentials:
        """Replace the given slots; ``None`` keeps the current value, ``""`` clears it."""
        credentials = self.credentials
        if gemini is not None:
            credentials.gemini = gemini.strip()
        if tavily is not None:
            credentials.tavily = tavily.strip()
        if openrouter is not None:
            credentials.openrouter = openrouter.strip()
        self.blob_store.set(CREDENTIALS_KEY, credentials.to_dict())
        return credentials


def mask(secret: str) -> str:
    """Hide all but the last four characters of a key."""
    if not secret:
        return "(not set)"
    if len(secret) <= 4:
        return "*" * len(secret)
    return "*" * (len(secret) - 4) + secret[-4:]
