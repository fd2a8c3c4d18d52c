"""Stage 3: download every discovered inventory that is not cached yet."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ..config import ConfigLocator, HarvestConfig
from ..engine import FetchError, Fetcher, TaskOutcome, ThreadPoolManager
from ..infra import InventoryCache
from ..logging_conf import stage_logger
from ..models import InventoryReference
from ..ui import ProgressReporter

POOL_NAME = "download"


@dataclass
class DownloadResult:
    downloaded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def download_inventory(
    reference: InventoryReference,
    config: HarvestConfig,
    fetcher: Fetcher,
    cache: InventoryCache,
    logger: structlog.BoundLogger,
) -> bool:
    """Fetch one inventory into the cache; failures are logged and return ``False``."""

    url = reference.data_url
    logger.info("download_start", url=url, slug=reference.slug)
    try:
        response = fetcher.get(url)
    except FetchError as exc:
        logger.error("download_failed", url=url, slug=reference.slug, error=str(exc))
        return False
    if response.status_code != 200:
        logger.error(
            "download_failed", url=url, slug=reference.slug, status=response.status_code
        )
        return False
    if len(response.text) <= config.min_body_length:
        logger.error(
            "download_failed",
            url=url,
            slug=reference.slug,
            reason="body_too_short",
            size=len(response.text),
        )
        return False
    cache.write(reference.slug, response.content)
    return True


def download_inventories(
    references: list[InventoryReference],
    config: HarvestConfig,
    locator: ConfigLocator,
    fetcher: Fetcher,
    thread_pool: ThreadPoolManager,
    *,
    refresh: bool = False,
    progress: ProgressReporter | None = None,
) -> DownloadResult:
    log = stage_logger(POOL_NAME)
    cache = InventoryCache(locator.agencies_dir)
    result = DownloadResult()

    pending: list[InventoryReference] = []
    for reference in references:
        if cache.exists(reference.slug) and not refresh:
            result.skipped.append(reference.slug)
        else:
            pending.append(reference)
    log.info("download_start_all", pending=len(pending), cached=len(result.skipped))
    if not pending:
        return result

    progress = progress or ProgressReporter(enabled=False)
    progress.set_label(POOL_NAME)
    progress.start(len(pending))

    def _settled(outcome: TaskOutcome[InventoryReference, bool]) -> None:
        progress.advance(
            success=outcome.ok and bool(outcome.value),
            failed=not (outcome.ok and outcome.value),
            current_url=outcome.item.data_url,
        )

    try:
        outcomes = thread_pool.run_all(
            POOL_NAME,
            lambda reference: download_inventory(reference, config, fetcher, cache, log),
            pending,
            max_workers=config.download_workers,
            on_settled=_settled,
        )
    finally:
        progress.close()

    for outcome in outcomes:
        if outcome.error is not None:
            log.error(
                "download_failed",
                url=outcome.item.data_url,
                slug=outcome.item.slug,
                error=repr(outcome.error),
            )
            result.failed.append(outcome.item.slug)
        elif outcome.value:
            result.downloaded.append(outcome.item.slug)
        else:
            result.failed.append(outcome.item.slug)
    log.info(
        "download_complete",
        downloaded=len(result.downloaded),
        failed=len(result.failed),
        skipped=len(result.skipped),
    )
    return result


__all__ = ["DownloadResult", "download_inventories", "download_inventory"]
