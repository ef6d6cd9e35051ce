"""Tests for the command line interface."""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from crawl_monitor.cli import app

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in ("GEMINI_API_KEY", "API_KEY", "TAVILY_API_KEY", "OPENROUTER_API_KEY"):
        monkeypatch.delenv(name, raising=False)

    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "paths": {"data_dir": str(tmp_path / "data")},
        "monitoring": {"seed_sources": []},
    }), encoding="utf-8")
    return path


def invoke(config_path: Path, *args: str):
    return runner.invoke(app, ["--config", str(config_path), *args])


def test_add_batch_and_list(config_path: Path) -> None:
    result = invoke(config_path, "add", "News", "https://a.example", "https://b.example", "--type", "twitter")

    assert result.exit_code == 0, result.output
    assert "News (1)" in result.output
    assert "News (2)" in result.output

    listing = invoke(config_path, "sources")
    assert "News (2) [twitter, every 2h]" in listing.output
    assert "https://b.example" in listing.output


def test_add_without_urls_fails(config_path: Path) -> None:
    result = invoke(config_path, "add", "News")

    assert result.exit_code == 1
    assert "At least one URL" in result.output


def test_add_from_file(config_path: Path, tmp_path: Path) -> None:
    url_file = tmp_path / "urls.txt"
    url_file.write_text("https://a.example\n\nhttps://b.example\n", encoding="utf-8")

    result = invoke(config_path, "add", "Batch", "--from-file", str(url_file))

    assert result.exit_code == 0, result.output
    assert "Batch (2)" in result.output


def test_keys_are_saved_and_masked(config_path: Path) -> None:
    result = invoke(config_path, "keys", "--gemini", "AIzaSy-secret-1234")

    assert result.exit_code == 0
    assert "Keys saved" in result.output
    assert "1234" in result.output
    assert "AIzaSy-secret" not in result.output

    shown = invoke(config_path, "keys")
    assert "Tavily:     (not set)" in shown.output


def test_trigger_without_keys_fails(config_path: Path) -> None:
    invoke(config_path, "add", "Tech", "https://tech.example")
    source_line = invoke(config_path, "sources").output
    source_id = source_line.split("id: ")[1].split()[0]

    result = invoke(config_path, "trigger", source_id)

    assert result.exit_code == 1
    assert "Configure a Gemini or Tavily API key" in result.output


def test_remove_unknown_source(config_path: Path) -> None:
    result = invoke(config_path, "remove", "nope")

    assert result.exit_code == 1
    assert "Unknown source: nope" in result.output


def test_empty_feed_and_unread(config_path: Path) -> None:
    assert "No results yet." in invoke(config_path, "feed").output
    assert invoke(config_path, "unread").output.strip() == "0"
    assert invoke(config_path, "read", "missing").exit_code == 1
