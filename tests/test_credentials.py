"""Tests for credential persistence."""

from pathlib import Path
from tempfile import TemporaryDirectory

from crawl_monitor.adapters.storage import YamlBlobStore
from crawl_monitor.core import Credentials, CredentialsStore
from crawl_monitor.core.credentials import mask


def test_defaults_used_until_saved() -> None:
    with TemporaryDirectory() as tmpdir:
        store = CredentialsStore(YamlBlobStore(Path(tmpdir)), defaults=Credentials(tavily="env-key"))

        assert store.credentials == Credentials(tavily="env-key")


def test_update_persists_and_wins_over_defaults() -> None:
    with TemporaryDirectory() as tmpdir:
        store = CredentialsStore(YamlBlobStore(Path(tmpdir)), defaults=Credentials(tavily="env-key"))

        store.update(gemini=" KEY1 ", tavily="")

        reloaded = CredentialsStore(YamlBlobStore(Path(tmpdir)), defaults=Credentials(tavily="env-key"))
        assert reloaded.credentials == Credentials(gemini="KEY1")


def test_update_keeps_unspecified_slots() -> None:
    with TemporaryDirectory() as tmpdir:
        store = CredentialsStore(YamlBlobStore(Path(tmpdir)))
        store.update(gemini="KEY1", openrouter="sk-or")

        store.update(tavily="KEY2")

        assert store.credentials == Credentials(gemini="KEY1", tavily="KEY2", openrouter="sk-or")


def test_legacy_gemini_key_is_picked_up() -> None:
    with TemporaryDirectory() as tmpdir:
        blob_store = YamlBlobStore(Path(tmpdir))
        blob_store.set("gemini_api_key", "OLD-KEY")

        store = CredentialsStore(blob_store)

        assert store.credentials.gemini == "OLD-KEY"


def test_mask() -> None:
    assert mask("") == "(not set)"
    assert mask("abc") == "***"
    assert mask("tvly-123456") == "*******3456"


def test_keys_saved_elsewhere_are_seen() -> None:
    with TemporaryDirectory() as tmpdir:
        running = CredentialsStore(YamlBlobStore(Path(tmpdir)))
        assert not running.credentials.can_fetch

        CredentialsStore(YamlBlobStore(Path(tmpdir))).update(tavily="KEY2")

        assert running.credentials == Credentials(tavily="KEY2")
