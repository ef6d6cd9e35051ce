"""Business logic use cases."""

import asyncio
import uuid
from datetime import datetime
from typing import Optional

from crawl_monitor.adapters.providers import ProviderChain, build_chain
from crawl_monitor.adapters.storage import YamlBlobStore
from crawl_monitor.config import Settings
from crawl_monitor.core import (
    BlobStore,
    ConfigurationError,
    CrawlResult,
    CrawlStatus,
    Credentials,
    CredentialsStore,
    ResultStore,
    Source,
    SourceBusyError,
    SourceRegistry,
    SourceType,
)
from crawl_monitor.core.registry import Clock, utc_now

MISSING_KEYS_MESSAGE = "Configure a Gemini or Tavily API key first (crawl-monitor keys --help)"


class CrawlOrchestrator:
    """Run one source's check end to end.

    Every run that gets past :meth:`begin` ends in exactly one of
    ``mark_success`` or ``mark_error``.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        results: ResultStore,
        chain: ProviderChain,
        crawl_timeout: Optional[float] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.registry = registry
        self.results = results
        self.chain = chain
        self.crawl_timeout = crawl_timeout
        self.clock = clock

    def begin(self, source_id: str, credentials: Credentials) -> Source:
        """Validate credentials and claim the source.

        Runs synchronously so the ``crawling`` status is visible to any other
        trigger before the first network call is awaited.

        Raises:
            ConfigurationError: no Gemini or Tavily key; the source is untouched.
            SourceBusyError: the source is already being crawled.
            KeyError: unknown source id.
        """
        if not credentials.can_fetch:
            raise ConfigurationError(MISSING_KEYS_MESSAGE)
        return self.registry.mark_crawling(source_id)

    async def run(self, source_id: str, credentials: Credentials) -> list[CrawlResult]:
        """Crawl a source and return the results that were new to the feed."""
        source = self.begin(source_id, credentials)
        return await self.complete(source, credentials)

    def launch(self, source_id: str, credentials: Credentials) -> "asyncio.Task[list[CrawlResult]]":
        """Claim the source now and finish the crawl in a background task."""
        source = self.begin(source_id, credentials)
        return asyncio.create_task(self.complete(source, credentials), name=f"crawl-{source_id}")

    async def complete(self, source: Source, credentials: Credentials) -> list[CrawlResult]:
        print(f"🔍 Crawling: {source.name} ({source.url})")

        try:
            raw_results = await asyncio.wait_for(
                self.chain.fetch(source, credentials), timeout=self.crawl_timeout
            )
        except asyncio.TimeoutError:
            self._fail(source, f"Crawl timed out after {self.crawl_timeout:g}s")
            return []
        except asyncio.CancelledError:
            self._fail(source, "Crawl was cancelled")
            raise
        except Exception as e:
            self._fail(source, str(e) or f"Unknown error during crawl ({type(e).__name__})")
            return []

        now = self.clock()
        items = [
            CrawlResult(
                id=str(uuid.uuid4()),
                source_id=source.id,
                source_name=source.name,
                title=raw.title,
                summary=raw.summary,
                original_url=raw.original_url,
                timestamp=now,
            )
            for raw in raw_results
        ]
        try:
            added = self.results.merge(items)
            self._transition(self.registry.mark_success, source.id)
        except Exception as e:
            self._fail(source, f"Could not save crawl results: {e}")
            return []

        print(f"  └─ ✓ {source.name}: {len(added)} new of {len(items)} found")
        return added

    def _fail(self, source: Source, message: str) -> None:
        self._transition(self.registry.mark_error, source.id, message)
        print(f"  └─ ❌ {source.name}: {message}")

    @staticmethod
    def _transition(mark, source_id: str, *args) -> None:
        """Apply a status change unless the source was removed mid-crawl."""
        try:
            mark(source_id, *args)
        except KeyError:
            pass


class Scheduler:
    """Recurring tick that starts crawls for due sources.

    A source's ``crawling`` status is the only lock: due sources already in
    flight are skipped, whether the crawl came from a tick or a manual trigger.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        orchestrator: CrawlOrchestrator,
        credentials_store: CredentialsStore,
        tick_seconds: float = 10.0,
        first_crawl_delay: float = 0.5,
        batch_trigger_spacing: float = 1.0,
        clock: Clock = utc_now,
    ) -> None:
        self.registry = registry
        self.orchestrator = orchestrator
        self.credentials_store = credentials_store
        self.tick_seconds = tick_seconds
        self.first_crawl_delay = first_crawl_delay
        self.batch_trigger_spacing = batch_trigger_spacing
        self.clock = clock
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def tick(self, now: Optional[datetime] = None) -> list[asyncio.Task]:
        """Start a crawl for every due source that is not already crawling."""
        due = self.registry.due(now or self.clock())
        if not due:
            return []

        credentials = self.credentials_store.credentials
        if not credentials.can_fetch:
            print(f"⚠️  {len(due)} source(s) due, but no API key is configured")
            return []

        tasks = []
        for source in due:
            try:
                task = self.orchestrator.launch(source.id, credentials)
            except (SourceBusyError, KeyError):
                continue
            self._track(task)
            tasks.append(task)
        return tasks

    def enqueue_initial(self, sources: list[Source]) -> list[asyncio.Task]:
        """Schedule one first crawl per new source at increasing offsets."""
        tasks = []
        for index, source in enumerate(sources):
            delay = self.first_crawl_delay + index * self.batch_trigger_spacing
            task = asyncio.create_task(self._delayed_crawl(source.id, delay), name=f"first-crawl-{source.id}")
            self._track(task)
            tasks.append(task)
        return tasks

    async def _delayed_crawl(self, source_id: str, delay: float) -> list[CrawlResult]:
        await asyncio.sleep(delay)
        if source_id not in self.registry:
            return []
        if self.registry.get(source_id).status == CrawlStatus.CRAWLING:
            return []

        try:
            return await self.orchestrator.run(source_id, self.credentials_store.credentials)
        except ConfigurationError as e:
            print(f"⚠️  First crawl skipped: {e}")
        except (SourceBusyError, KeyError):
            pass
        return []

    async def trigger(self, source_id: str) -> list[CrawlResult]:
        """Crawl a source right away, ignoring its schedule.

        Raises:
            ConfigurationError: no usable API key.
            SourceBusyError: the source is already being crawled.
            KeyError: unknown source id.
        """
        task = self.orchestrator.launch(source_id, self.credentials_store.credentials)
        self._track(task)
        return await task

    async def run_forever(self, stop: Optional[asyncio.Event] = None) -> None:
        """Tick until ``stop`` is set."""
        stop = stop or asyncio.Event()
        print(f"⏱️  Scheduler started: {len(self.registry)} source(s), tick every {self.tick_seconds:g}s")

        while not stop.is_set():
            try:
                self.tick()
            except Exception as e:
                print(f"⚠️  Scheduler tick failed: {e}")

            try:
                await asyncio.wait_for(stop.wait(), timeout=self.tick_seconds)
            except asyncio.TimeoutError:
                pass

        print("⏹️  Scheduler stopped")

    async def drain(self) -> None:
        """Wait for every crawl started so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class MonitorService:
    """Entry point for user actions on sources, results and credentials."""

    def __init__(
        self,
        registry: SourceRegistry,
        results: ResultStore,
        credentials_store: CredentialsStore,
        orchestrator: CrawlOrchestrator,
        scheduler: Scheduler,
    ) -> None:
        self.registry = registry
        self.results = results
        self.credentials_store = credentials_store
        self.orchestrator = orchestrator
        self.scheduler = scheduler

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        blob_store: Optional[BlobStore] = None,
        chain: Optional[ProviderChain] = None,
        clock: Clock = utc_now,
    ) -> "MonitorService":
        """Wire the default adapters together."""
        blob_store = blob_store or YamlBlobStore(settings.data_dir)
        registry = SourceRegistry(
            blob_store,
            clock=clock,
            stagger_seconds=settings.scheduler.stagger_seconds,
            seed_sources=settings.monitoring.seed_sources,
        )
        results = ResultStore(blob_store)
        credentials_store = CredentialsStore(blob_store, defaults=settings.default_credentials)
        orchestrator = CrawlOrchestrator(
            registry,
            results,
            chain or build_chain(settings),
            crawl_timeout=settings.scheduler.crawl_timeout_seconds or None,
            clock=clock,
        )
        scheduler = Scheduler(
            registry,
            orchestrator,
            credentials_store,
            tick_seconds=settings.scheduler.tick_seconds,
            first_crawl_delay=settings.scheduler.first_crawl_delay,
            batch_trigger_spacing=settings.scheduler.batch_trigger_spacing,
            clock=clock,
        )
        return cls(registry, results, credentials_store, orchestrator, scheduler)

    @property
    def credentials(self) -> Credentials:
        return self.credentials_store.credentials

    def add_sources(
        self,
        name: str,
        urls: str,
        type: SourceType = SourceType.WEBSITE,
        interval_hours: int = 2,
        auto_crawl: bool = True,
    ) -> list[Source]:
        """Add one source or a newline-delimited batch.

        With ``auto_crawl`` and a running event loop the new sources get their
        first crawl right away instead of waiting for the next tick.
        """
        sources = self.registry.add(name, urls, type, interval_hours)
        print(f"➕ Added {len(sources)} source(s): {', '.join(s.name for s in sources)}")

        if auto_crawl:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                return sources
            self.scheduler.enqueue_initial(sources)
        return sources

    def remove_source(self, source_id: str) -> Source:
        return self.registry.remove(source_id)

    async def trigger(self, source_id: str) -> list[CrawlResult]:
        return await self.scheduler.trigger(source_id)

    def mark_read(self, result_id: str) -> bool:
        return self.results.mark_read(result_id)

    def unread_count(self) -> int:
        return self.results.unread_count()

    def update_credentials(
        self,
        gemini: Optional[str] = None,
        tavily: Optional[str] = None,
        openrouter: Optional[str] = None,
    ) -> Credentials:
        return self.credentials_store.update(gemini=gemini, tavily=tavily, openrouter=openrouter)

    async def run(self, once: bool = False, stop: Optional[asyncio.Event] = None) -> None:
        """Run the scheduler. With ``once`` do a single tick and wait for it."""
        self.registry.recover_stale()
        if once:
            self.scheduler.tick()
            await self.scheduler.drain()
            return

        try:
            await self.scheduler.run_forever(stop)
        finally:
            await self.scheduler.drain()
