"""CLI entry point for crawl monitor."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from crawl_monitor.config import get_settings
from crawl_monitor.core import ConfigurationError, CrawlStatus, SourceBusyError, SourceType
from crawl_monitor.core.credentials import mask
from crawl_monitor.use_cases import MonitorService

app = typer.Typer(help="Monitor websites and social accounts for new updates.", no_args_is_help=True)

STATUS_EMOJI = {
    CrawlStatus.IDLE: "⚪",
    CrawlStatus.CRAWLING: "🔄",
    CrawlStatus.SUCCESS: "🟢",
    CrawlStatus.ERROR: "🔴",
}


def _service(ctx: typer.Context) -> MonitorService:
    return MonitorService.from_settings(get_settings(ctx.obj["config"]))


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Monitor websites and social accounts for new updates."""
    ctx.obj = {"config": config}


@app.command()
def run(
    ctx: typer.Context,
    once: bool = typer.Option(False, "--once", help="Run a single scheduler tick and exit"),
) -> None:
    """Start the polling scheduler."""
    service = _service(ctx)
    credentials = service.credentials

    print("\n" + "=" * 70)
    print("📡 CRAWL MONITOR")
    print("=" * 70)
    print("\n🔑 Keys:")
    print(f"  {'✓' if credentials.gemini else '✗'} Gemini - search-grounded summaries")
    print(f"  {'✓' if credentials.tavily else '✗'} Tavily - web search")
    print(f"  {'✓' if credentials.openrouter else '⚠️ '} OpenRouter - optional summarizer for Tavily")
    if not credentials.can_fetch:
        print("\n⚠️  No Gemini or Tavily key: due sources will be skipped until one is set")

    try:
        asyncio.run(service.run(once=once))
    except KeyboardInterrupt:
        print("\n⏹️  Interrupted")

    print(f"\n📬 Unread: {service.unread_count()}")


@app.command()
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Display name shared by the batch"),
    urls: Optional[list[str]] = typer.Argument(None, help="One or more URLs or account names"),
    from_file: Optional[Path] = typer.Option(None, "--from-file", "-f", help="File with one URL per line"),
    type: SourceType = typer.Option(SourceType.WEBSITE, "--type", "-t", case_sensitive=False),
    interval: int = typer.Option(2, "--interval", "-i", min=1, max=168, help="Hours between checks"),
    crawl: bool = typer.Option(False, "--crawl", help="Run the first crawl now"),
) -> None:
    """Add a source, or a batch of sources under one name."""
    lines = list(urls or [])
    if from_file:
        lines.append(from_file.read_text(encoding="utf-8"))

    service = _service(ctx)
    try:
        if crawl:
            sources = asyncio.run(_add_and_crawl(service, name, "\n".join(lines), type, interval))
        else:
            sources = service.add_sources(name, "\n".join(lines), type, interval, auto_crawl=False)
    except ValueError as e:
        print(f"❌ {e}")
        raise typer.Exit(code=1)

    for source in sources:
        print(f"  {STATUS_EMOJI[source.status]} {source.id}  {source.name}  {source.url}")


async def _add_and_crawl(service: MonitorService, name: str, urls: str, type: SourceType, interval: int):
    sources = service.add_sources(name, urls, type, interval, auto_crawl=True)
    await service.scheduler.drain()
    return [service.registry.get(s.id) for s in sources if s.id in service.registry]


@app.command()
def remove(ctx: typer.Context, source_id: str) -> None:
    """Delete a source. Its results stay in the feed."""
    try:
        source = _service(ctx).remove_source(source_id)
    except KeyError as e:
        print(f"❌ {e.args[0]}")
        raise typer.Exit(code=1)
    print(f"🗑️  Removed {source.name}")


@app.command()
def sources(ctx: typer.Context) -> None:
    """List monitored sources and their status."""
    service = _service(ctx)
    if not len(service.registry):
        print("No sources yet. Add one with `crawl-monitor add`.")
        return

    for source in service.registry.list_sources():
        last = source.last_checked.strftime("%Y-%m-%d %H:%M") if source.last_checked else "never"
        print(f"{STATUS_EMOJI[source.status]} {source.name} [{source.type.value}, every {source.interval_hours}h]")
        print(f"  └─ {source.url}")
        print(f"  └─ id: {source.id}  last: {last}  next: {source.next_check.strftime('%Y-%m-%d %H:%M')}")
        if source.error_message:
            print(f"  └─ ❌ {source.error_message}")


@app.command()
def trigger(ctx: typer.Context, source_id: str) -> None:
    """Crawl a source now, regardless of its schedule."""
    service = _service(ctx)
    try:
        added = asyncio.run(service.trigger(source_id))
    except (ConfigurationError, SourceBusyError) as e:
        print(f"⚠️  {e}")
        raise typer.Exit(code=1)
    except KeyError as e:
        print(f"❌ {e.args[0]}")
        raise typer.Exit(code=1)

    source = service.registry.get(source_id)
    if source.status == CrawlStatus.ERROR:
        raise typer.Exit(code=1)
    for result in added:
        print(f"  📰 {result.title}")


@app.command()
def feed(
    ctx: typer.Context,
    unread: bool = typer.Option(False, "--unread", "-u", help="Only unread results"),
    limit: int = typer.Option(20, "--limit", "-n", min=1),
) -> None:
    """Show the newest results."""
    service = _service(ctx)
    results = service.results.list_results(unread_only=unread)[:limit]
    if not results:
        print("No results yet.")
        return

    for result in results:
        marker = "  " if result.is_read else "🆕"
        print(f"{marker} {result.title}")
        print(f"   {result.source_name} · {result.timestamp.strftime('%Y-%m-%d %H:%M')} · {result.original_url}")
        print(f"   {result.summary}")
        print(f"   id: {result.id}\n")


@app.command()
def read(ctx: typer.Context, result_id: str) -> None:
    """Mark a result as read."""
    service = _service(ctx)
    if not service.mark_read(result_id):
        print(f"❌ Unknown result: {result_id}")
        raise typer.Exit(code=1)
    print(f"✓ Marked as read ({service.unread_count()} unread)")


@app.command("unread")
def unread_count(ctx: typer.Context) -> None:
    """Print the number of unread results."""
    print(_service(ctx).unread_count())


@app.command()
def keys(
    ctx: typer.Context,
    gemini: Optional[str] = typer.Option(None, help="Gemini API key (empty string clears it)"),
    tavily: Optional[str] = typer.Option(None, help="Tavily API key"),
    openrouter: Optional[str] = typer.Option(None, help="OpenRouter API key"),
) -> None:
    """Show or update provider API keys."""
    service = _service(ctx)
    if gemini is not None or tavily is not None or openrouter is not None:
        service.update_credentials(gemini=gemini, tavily=tavily, openrouter=openrouter)
        print("✓ Keys saved")

    credentials = service.credentials
    print(f"  Gemini:     {mask(credentials.gemini)}")
    print(f"  Tavily:     {mask(credentials.tavily)}")
    print(f"  OpenRouter: {mask(credentials.openrouter)}")


if __name__ == "__main__":
    app()
