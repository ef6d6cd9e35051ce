"""Blob store keeping one YAML file per key."""

import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml

from crawl_monitor.core.interfaces import BlobStore


class YamlBlobStore(BlobStore):
    """Persist each blob as ``<data_dir>/<key>.yaml``."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not re.fullmatch(r"[\w-]+", key):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.data_dir / f"{key}.yaml"

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None

        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)

    def set(self, key: str, value: Any) -> None:
        """Write the blob to a temp file first, then swap it in."""
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(value, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
