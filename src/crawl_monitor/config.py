"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from crawl_monitor.core.entities import Credentials


@dataclass
class ProvidersConfig:
    """Content provider API settings."""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.3
    tavily_base_url: str = "https://api.tavily.com"
    tavily_max_results: int = 3
    tavily_search_depth: str = "basic"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "google/gemini-2.0-flash-001"
    request_timeout: float = 60.0
    max_retries: int = 2
    initial_retry_delay: float = 2.0
    max_retry_delay: float = 30.0


@dataclass
class SchedulerConfig:
    """Polling loop settings."""
    tick_seconds: float = 10.0
    stagger_seconds: float = 2.0
    first_crawl_delay: float = 0.5
    batch_trigger_spacing: float = 1.0
    crawl_timeout_seconds: float = 120.0


@dataclass
class PathsConfig:
    """Path settings."""
    data_dir: Path = Path("data")


@dataclass
class MonitoringConfig:
    """Monitoring settings."""
    summary_language: str = "English"
    seed_sources: list[dict[str, Any]] = field(default_factory=lambda: [
        {
            "name": "TechCrunch",
            "url": "https://techcrunch.com",
            "type": "website",
            "interval_hours": 2,
        },
    ])


@dataclass
class PromptsConfig:
    """Prompts for content providers.

    Source prompts are formatted with ``name``, ``url`` and ``language``.
    """
    website: str = (
        'Search for the latest headlines or news articles from the website "{name}" ({url}).\n'
        "Find the most significant update from the last 24 hours.\n"
        "Summarize the content in {language}.\n"
        "If the content is already in {language}, just summarize it.\n"
        "Start your response with a clear title line, followed by the summary."
    )
    facebook: str = (
        'Search for the latest public posts or news updates from the Facebook page "{name}" ({url}).\n'
        "Find the most recent significant update from the last 24 hours.\n"
        "Summarize the content in {language}.\n"
        "If the content is already in {language}, just summarize it.\n"
        "Start your response with a clear title line, followed by the summary."
    )
    twitter: str = (
        'Search for the latest public posts from the Twitter / X account "{name}" ({url}).\n'
        "Find the most recent significant update from the last 24 hours.\n"
        "Summarize the content in {language}.\n"
        "If the content is already in {language}, just summarize it.\n"
        "Start your response with a clear title line, followed by the summary."
    )
    search_query: str = "latest news and updates from {name} {url}"
    summarizer_system: str = (
        "You are a news monitoring assistant. Summarize the provided search results "
        "in {language}. Reply with a short title on the first line, followed by the summary."
    )
    summarizer_user: str = (
        'Summarize the most significant recent update for "{name}" ({url}) '
        "based on this context:\n\n{context}"
    )


@dataclass
class Settings:
    """Application settings."""

    # API keys (from environment only, used until credentials are saved)
    gemini_api_key: str = ""
    tavily_api_key: str = ""
    openrouter_api_key: str = ""

    # Config sections
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    prompts: PromptsConfig = field(default_factory=PromptsConfig)

    @property
    def data_dir(self) -> Path:
        return self.paths.data_dir

    @property
    def summary_language(self) -> str:
        return self.monitoring.summary_language

    @property
    def default_credentials(self) -> Credentials:
        return Credentials(
            gemini=self.gemini_api_key,
            tavily=self.tavily_api_key,
            openrouter=self.openrouter_api_key,
        )


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
        tavily_api_key=os.getenv("TAVILY_API_KEY", ""),
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
    )

    for section in ("providers", "scheduler", "monitoring", "prompts"):
        for key, value in (config.get(section) or {}).items():
            setattr(getattr(settings, section), key, value)

    if "paths" in config:
        for key, value in config["paths"].items():
            setattr(settings.paths, key, Path(value))

    return settings
