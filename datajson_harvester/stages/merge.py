"""Stage 4: combine cached inventories into one deduplicated dataset."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from ..config import ConfigLocator
from ..engine import Parser, RecordDeduplicator
from ..engine.exporter import FileExporter
from ..infra import InventoryCache
from ..logging_conf import stage_logger
from ..models import InventoryReference

CSV_COLUMNS = ("agency", "publisher", "title", "description", "access")

# Upstream placeholder for an unset access level.
ACCESS_LEVEL_UNSET = "-"


@dataclass
class MergeResult:
    skipped: bool = False
    inventories: int = 0
    missing: int = 0
    unreadable: int = 0
    records_in: int = 0
    dropped: int = 0
    duplicates: int = 0
    records_out: int = 0


def load_records(
    references: Iterable[InventoryReference],
    cache: InventoryCache,
    parser: Parser,
    result: MergeResult | None = None,
) -> list[Any]:
    """Flatten the dataset entries of every cached inventory, stamping the agency."""

    log = stage_logger("merge")
    result = result if result is not None else MergeResult()
    records: list[Any] = []
    for reference in references:
        text = cache.read_text(reference.slug)
        if text is None:
            result.missing += 1
            continue
        inventory = parser.parse_inventory(reference.slug, text)
        if inventory is None:
            result.unreadable += 1
            log.warning("inventory_unreadable", slug=reference.slug)
            continue
        result.inventories += 1
        for record in inventory.records:
            if isinstance(record, dict):
                record["agency"] = reference.agency
            records.append(record)
    result.records_in = len(records)
    return records


def keep_record(record: Any) -> bool:
    return isinstance(record, dict) and record.get("accessLevel") != ACCESS_LEVEL_UNSET


def merge_records(records: Iterable[Any], result: MergeResult | None = None) -> list[dict[str, Any]]:
    """Drop malformed and placeholder records, then deduplicate (last one wins)."""

    dedup = RecordDeduplicator()
    dropped = 0
    for record in records:
        if keep_record(record):
            dedup.add(record)
        else:
            dropped += 1
    if result is not None:
        result.dropped = dropped
        result.duplicates = dedup.duplicates
    return dedup.records()


def project_record(record: dict[str, Any]) -> dict[str, Any]:
    publisher = record.get("publisher")
    return {
        "agency": record.get("agency"),
        "publisher": publisher.get("name") if isinstance(publisher, dict) else None,
        "title": record.get("title"),
        "description": record.get("description"),
        "access": record.get("accessLevel"),
    }


def merge_inventories(
    references: list[InventoryReference],
    locator: ConfigLocator,
    *,
    refresh: bool = False,
    parser: Parser | None = None,
) -> MergeResult:
    log = stage_logger("merge")
    if locator.combined_json.exists() and locator.combined_csv.exists() and not refresh:
        log.info("merge_skipped", reason="outputs_exist")
        return MergeResult(skipped=True)

    result = MergeResult()
    cache = InventoryCache(locator.agencies_dir)
    records = load_records(references, cache, parser or Parser(), result)
    merged = merge_records(records, result)
    result.records_out = len(merged)

    with FileExporter(locator.combined_json, "json") as json_exporter:
        json_exporter.export_many(merged)
    with FileExporter(locator.combined_csv, "csv", columns=CSV_COLUMNS) as csv_exporter:
        csv_exporter.export_many(project_record(record) for record in merged)

    log.info(
        "merge_complete",
        inventories=result.inventories,
        missing=result.missing,
        records_in=result.records_in,
        dropped=result.dropped,
        duplicates=result.duplicates,
        records_out=result.records_out,
    )
    return result


__all__ = [
    "ACCESS_LEVEL_UNSET",
    "CSV_COLUMNS",
    "MergeResult",
    "keep_record",
    "load_records",
    "merge_inventories",
    "merge_records",
    "project_record",
]
