"""Stage 1: fetch and cache the .gov domain directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from ..config import ConfigLocator, HarvestConfig
from ..engine import FetchError, Fetcher
from ..infra import atomic_write_bytes
from ..logging_conf import stage_logger


class SourceListError(RuntimeError):
    """The domain directory could not be retrieved; nothing downstream can run."""


@dataclass(slots=True)
class SourceListResult:
    path: Path
    downloaded: bool


def acquire_source_list(
    config: HarvestConfig,
    locator: ConfigLocator,
    fetcher: Fetcher,
    *,
    refresh: bool = False,
    logger: structlog.BoundLogger | None = None,
) -> SourceListResult:
    """Ensure the directory CSV exists locally, downloading it when needed."""

    log = logger or stage_logger("source_list")
    path = locator.directory_csv
    if path.exists() and not refresh:
        log.info("source_list_cached", path=str(path))
        return SourceListResult(path=path, downloaded=False)

    log.info("source_list_download", url=config.directory_url)
    try:
        response = fetcher.get(config.directory_url)
    except FetchError as exc:
        log.error("source_list_failed", url=config.directory_url, error=str(exc))
        raise SourceListError(f"Could not download domain directory: {exc}") from exc
    if response.status_code != 200:
        log.error(
            "source_list_failed", url=config.directory_url, status=response.status_code
        )
        raise SourceListError(
            f"Could not download domain directory: HTTP {response.status_code} "
            f"from {config.directory_url}"
        )
    atomic_write_bytes(path, response.content)
    log.info("source_list_saved", path=str(path), size=len(response.content))
    return SourceListResult(path=path, downloaded=True)


__all__ = ["SourceListError", "SourceListResult", "acquire_source_list"]
