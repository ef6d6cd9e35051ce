"""Storage adapters."""

from crawl_monitor.adapters.storage.yaml_store import YamlBlobStore

__all__ = ["YamlBlobStore"]
