"""Registry of monitored sources and their scheduling state."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from crawl_monitor.core.entities import CrawlStatus, Source, SourceType
from crawl_monitor.core.errors import SourceBusyError
from crawl_monitor.core.interfaces import BlobStore

SOURCES_KEY = "sources"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def split_urls(urls: str) -> list[str]:
    """Split a newline-delimited blob into trimmed, non-empty urls."""
    return [u.strip() for u in urls.split("\n") if u.strip()]


class SourceRegistry:
    """Own the set of sources and every status transition.

    Every mutation re-reads the persisted sources, applies the change and
    writes them back in full, so short-lived CLI commands and a running
    scheduler can share one data directory.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        clock: Clock = utc_now,
        stagger_seconds: float = 2.0,
        seed_sources: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        self.blob_store = blob_store
        self.clock = clock
        self.stagger_seconds = stagger_seconds
        self._sources: dict[str, Source] = {}
        self._load(seed_sources or [])

    def _load(self, seed_sources: list[dict[str, Any]]) -> None:
        data = self.blob_store.get(SOURCES_KEY)

        if data is None:
            now = self.clock()
            for seed in seed_sources:
                source = Source(
                    id=seed.get("id") or str(uuid.uuid4()),
                    name=seed["name"],
                    url=seed["url"],
                    type=SourceType(seed.get("type", SourceType.WEBSITE.value)),
                    interval_hours=int(seed.get("interval_hours", 2)),
                    next_check=now,
                )
                self._sources[source.id] = source
            if self._sources:
                self._save()
            return

        self._sources = {s.id: s for s in self._parse(data)}

    def _parse(self, data: list[Any]) -> list[Source]:
        sources = []
        for raw in data:
            try:
                sources.append(Source.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                print(f"⚠️  Warning: Skipping unreadable source {raw!r}: {e}")
        return sources

    def refresh(self) -> None:
        """Pick up changes other processes saved to the same data directory.

        Sources already held here are updated in place, so references taken
        earlier stay valid. Sources gone from disk are dropped.
        """
        data = self.blob_store.get(SOURCES_KEY)
        if data is None:
            return

        merged: dict[str, Source] = {}
        for loaded in self._parse(data):
            current = self._sources.get(loaded.id)
            if current is not None:
                vars(current).update(vars(loaded))
                loaded = current
            merged[loaded.id] = loaded
        self._sources = merged

    def _save(self) -> None:
        self.blob_store.set(SOURCES_KEY, [s.to_dict() for s in self._sources.values()])

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._sources

    def get(self, source_id: str) -> Source:
        try:
            return self._sources[source_id]
        except KeyError:
            raise KeyError(f"Unknown source: {source_id}") from None

    def list_sources(self) -> list[Source]:
        return list(self._sources.values())

    def due(self, now: Optional[datetime] = None) -> list[Source]:
        """Sources not crawling whose next check has come."""
        self.refresh()
        now = now or self.clock()
        return [s for s in self._sources.values() if s.is_due(now)]

    def add(
        self,
        name: str,
        urls: str,
        type: SourceType = SourceType.WEBSITE,
        interval_hours: int = 2,
    ) -> list[Source]:
        """Create one source per url in a newline-delimited blob.

        With more than one url every name gets a 1-based ``(k)`` suffix. First
        checks are staggered so a batch does not fire all at once.
        """
        name = name.strip()
        url_list = split_urls(urls)
        if not name:
            raise ValueError("Name cannot be empty")
        if not url_list:
            raise ValueError("At least one URL is required")
        if interval_hours < 1:
            raise ValueError("Interval must be at least one hour")

        self.refresh()
        now = self.clock()
        created: list[Source] = []

        for index, url in enumerate(url_list):
            source = Source(
                id=str(uuid.uuid4()),
                name=f"{name} ({index + 1})" if len(url_list) > 1 else name,
                url=url,
                type=type,
                interval_hours=interval_hours,
                next_check=now + timedelta(seconds=index * self.stagger_seconds),
            )
            self._sources[source.id] = source
            created.append(source)

        self._save()
        return created

    def remove(self, source_id: str) -> Source:
        """Delete a source. Its results stay in the feed."""
        self.refresh()
        source = self.get(source_id)
        del self._sources[source_id]
        self._save()
        return source

    def mark_crawling(self, source_id: str) -> Source:
        self.refresh()
        source = self.get(source_id)
        if source.status == CrawlStatus.CRAWLING:
            raise SourceBusyError(f"Source {source.name!r} is already being crawled")
        source.status = CrawlStatus.CRAWLING
        source.error_message = None
        self._save()
        return source

    def mark_success(self, source_id: str) -> Source:
        self.refresh()
        source = self.get(source_id)
        now = self.clock()
        source.status = CrawlStatus.SUCCESS
        source.error_message = None
        source.last_checked = now
        source.next_check = now + timedelta(hours=source.interval_hours)
        self._save()
        return source

    def mark_error(self, source_id: str, message: str) -> Source:
        """Record a failure. ``next_check`` is left alone so the source is retried."""
        self.refresh()
        source = self.get(source_id)
        source.status = CrawlStatus.ERROR
        source.error_message = message
        self._save()
        return source

    def recover_stale(self) -> list[Source]:
        """Reset sources left in ``crawling`` by a previous process.

        Called when the scheduler starts. Other commands must not call it
        while a scheduler may be crawling from the same data directory.
        """
        self.refresh()
        now = self.clock()
        recovered = []
        for source in self._sources.values():
            if source.status == CrawlStatus.CRAWLING:
                source.status = CrawlStatus.IDLE
                source.next_check = max(source.next_check, now)
                recovered.append(source)

        if recovered:
            print(f"♻️  Reset {len(recovered)} source(s) interrupted mid-crawl")
            self._save()
        return recovered
