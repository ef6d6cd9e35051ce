"""Deduplicated, newest-first feed of crawl results."""

from typing import Any, Optional

from crawl_monitor.core.entities import CrawlResult
from crawl_monitor.core.interfaces import BlobStore

RESULTS_KEY = "results"


class ResultStore:
    """Hold discovered items and persist them after every change.

    Items are unique by ``(title, source_id)``. A merge puts the new items in
    front of everything already stored, keeping the provider's order.
    Changes re-read the persisted feed first, so read marks set by another
    process are not lost.
    """

    def __init__(self, blob_store: BlobStore) -> None:
        self.blob_store = blob_store
        self._results: list[CrawlResult] = []
        self._load()

    def _load(self) -> None:
        """Read persisted results once at startup."""
        self._results = self._parse(self.blob_store.get(RESULTS_KEY) or [])

    def _parse(self, data: list[Any]) -> list[CrawlResult]:
        results = []
        for raw in data:
            try:
                results.append(CrawlResult.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                print(f"⚠️  Warning: Skipping unreadable result {raw!r}: {e}")
        return results

    def refresh(self) -> None:
        """Pick up results and read marks saved by other processes."""
        data = self.blob_store.get(RESULTS_KEY)
        if data is None:
            return

        current = {r.id: r for r in self._results}
        merged: list[CrawlResult] = []
        for loaded in self._parse(data):
            existing = current.get(loaded.id)
            if existing is not None:
                vars(existing).update(vars(loaded))
                loaded = existing
            merged.append(loaded)
        self._results = merged

    def _save(self) -> None:
        self.blob_store.set(RESULTS_KEY, [r.to_dict() for r in self._results])

    def __len__(self) -> int:
        return len(self._results)

    def list_results(self, unread_only: bool = False) -> list[CrawlResult]:
        """Return results newest first."""
        if unread_only:
            return [r for r in self._results if not r.is_read]
        return list(self._results)

    def get(self, result_id: str) -> Optional[CrawlResult]:
        return next((r for r in self._results if r.id == result_id), None)

    def contains(self, title: str, source_id: str) -> bool:
        return any(r.dedup_key == (title, source_id) for r in self._results)

    def merge(self, items: list[CrawlResult]) -> list[CrawlResult]:
        """Insert items that are not yet stored.

        Returns:
            The items actually added, in the order they now appear.
        """
        self.refresh()
        seen = {r.dedup_key for r in self._results}
        added: list[CrawlResult] = []

        for item in items:
            if item.dedup_key in seen:
                continue
            seen.add(item.dedup_key)
            added.append(item)

        if added:
            self._results = added + self._results
            self._save()

        return added

    def mark_read(self, result_id: str) -> bool:
        """Mark a result as read.

        Returns:
            False when no result has this id.
        """
        self.refresh()
        result = self.get(result_id)
        if result is None:
            return False
        if not result.is_read:
            result.is_read = True
            self._save()
        return True

    def unread_count(self) -> int:
        self.refresh()
        return sum(1 for r in self._results if not r.is_read)
