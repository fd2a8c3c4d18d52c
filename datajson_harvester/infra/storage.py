"""Flat-file storage for cached inventory payloads."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

CACHE_SUFFIX = ".data.json"


def atomic_write_bytes(path: Path, body: bytes) -> Path:
    """Write ``body`` to ``path`` through a sibling temp file and ``os.replace``."""

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as stream:
            stream.write(body)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


class InventoryCache:
    """Map slug identifiers to payload files under the agencies directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, slug: str) -> Path:
        if not slug or "/" in slug or "\\" in slug or slug in (".", ".."):
            raise ValueError(f"Invalid cache key: {slug!r}")
        return self.root / f"{slug}{CACHE_SUFFIX}"

    def exists(self, slug: str) -> bool:
        return self.path_for(slug).is_file()

    def read_text(self, slug: str) -> str | None:
        path = self.path_for(slug)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8-sig", errors="replace")

    def write(self, slug: str, body: bytes) -> Path:
        """Persist ``body`` verbatim; readers never observe a partial file."""

        return atomic_write_bytes(self.path_for(slug), body)


__all__ = ["CACHE_SUFFIX", "InventoryCache", "atomic_write_bytes"]
