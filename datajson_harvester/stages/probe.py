"""Stage 2: look for a data.json inventory on every candidate domain."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from ..config import ConfigLocator, HarvestConfig
from ..engine import FetchError, Fetcher, Parser, TaskOutcome, ThreadPoolManager
from ..infra import InventoryCache
from ..logging_conf import stage_logger
from ..models import DomainCandidate, InventoryReference
from ..ui import ProgressReporter

POOL_NAME = "probe"


@dataclass
class ProbeResult:
    references: list[InventoryReference] = field(default_factory=list)
    probed: int = 0
    unresolved: int = 0
    errors: int = 0
    reused: bool = False


def load_inventory_list(path: Path) -> list[InventoryReference]:
    rows = json.loads(path.read_text(encoding="utf-8"))
    return [InventoryReference.model_validate(row) for row in rows]


def save_inventory_list(path: Path, references: list[InventoryReference]) -> None:
    payload = [reference.to_row() for reference in references]
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    tmp_path.replace(path)


def candidate_urls(candidate: DomainCandidate, config: HarvestConfig) -> list[str]:
    """Return the bare-domain URL followed by the ``www.`` variant."""

    urls = [f"http://{candidate.domain}{config.inventory_path}"]
    if config.www_fallback:
        urls.append(f"http://www.{candidate.domain}{config.inventory_path}")
    return urls


def probe_candidate(
    candidate: DomainCandidate,
    config: HarvestConfig,
    fetcher: Fetcher,
    parser: Parser,
    cache: InventoryCache,
    logger: structlog.BoundLogger,
) -> InventoryReference | None:
    for url in candidate_urls(candidate, config):
        try:
            response = fetcher.get(url)
        except FetchError as exc:
            logger.debug("probe_miss", url=url, error=str(exc))
            continue
        if response.status_code != 200:
            logger.debug("probe_miss", url=url, status=response.status_code)
            continue
        if not parser.looks_like_inventory(response.text):
            logger.debug("probe_miss", url=url, reason="invalid_json")
            continue
        cache.write(candidate.slug, response.content)
        logger.info("probe_found", url=url, slug=candidate.slug)
        return InventoryReference.from_candidate(candidate, url)
    return None


def probe_inventories(
    config: HarvestConfig,
    locator: ConfigLocator,
    fetcher: Fetcher,
    thread_pool: ThreadPoolManager,
    *,
    refresh: bool = False,
    parser: Parser | None = None,
    progress: ProgressReporter | None = None,
) -> ProbeResult:
    """Probe every eligible directory row and persist the ones that resolve.

    An existing discovered list is reused as-is unless ``refresh`` is set.
    """

    log = stage_logger(POOL_NAME)
    list_path = locator.inventory_list
    if list_path.exists() and not refresh:
        references = load_inventory_list(list_path)
        log.info("inventory_list_cached", path=str(list_path), count=len(references))
        return ProbeResult(references=references, reused=True)

    parser = parser or Parser()
    cache = InventoryCache(locator.agencies_dir)
    text = locator.directory_csv.read_text(encoding="utf-8", errors="replace")
    candidates = parser.parse_directory(text, config.domain_type)
    log.info("probe_start", candidates=len(candidates), workers=config.probe_workers)

    progress = progress or ProgressReporter(enabled=False)
    progress.set_label(POOL_NAME)
    progress.start(len(candidates))

    def _settled(outcome: TaskOutcome[DomainCandidate, InventoryReference | None]) -> None:
        if outcome.error is not None:
            progress.advance(failed=True, current_url=outcome.item.domain)
        elif outcome.value is not None:
            progress.advance(success=True, current_url=outcome.value.data_url)
        else:
            progress.advance(skipped=True, current_url=outcome.item.domain)

    try:
        outcomes = thread_pool.run_all(
            POOL_NAME,
            lambda candidate: probe_candidate(candidate, config, fetcher, parser, cache, log),
            candidates,
            max_workers=config.probe_workers,
            on_settled=_settled,
        )
    finally:
        progress.close()

    result = ProbeResult(probed=len(candidates))
    for outcome in outcomes:
        if outcome.error is not None:
            result.errors += 1
            log.warning("probe_error", domain=outcome.item.domain, error=repr(outcome.error))
        elif outcome.value is None:
            result.unresolved += 1
        else:
            result.references.append(outcome.value)

    save_inventory_list(list_path, result.references)
    log.info(
        "probe_complete",
        found=len(result.references),
        unresolved=result.unresolved,
        errors=result.errors,
        path=str(list_path),
    )
    return result


__all__ = [
    "ProbeResult",
    "candidate_urls",
    "load_inventory_list",
    "probe_candidate",
    "probe_inventories",
    "save_inventory_list",
]
