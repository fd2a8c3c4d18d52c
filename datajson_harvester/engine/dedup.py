"""In-memory record deduplication keyed by identifier and publisher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Tuple

RecordKey = Tuple[str, str]


@dataclass
class DeduplicationResult:
    key: RecordKey
    replaced: bool

    @property
    def is_duplicate(self) -> bool:
        return self.replaced


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def record_key(record: dict[str, Any]) -> RecordKey:
    """Return the (identifier, publisher name) pair identifying a dataset.

    Identifiers are only unique within a publisher, so both parts are needed.
    """

    publisher = record.get("publisher")
    name = publisher.get("name") if isinstance(publisher, dict) else None
    # A pair, not identifier + name concatenated: ("1", "2A") and ("12", "A") differ.
    return _text(record.get("identifier")), _text(name)


class RecordDeduplicator:
    """Collapse records sharing a key; the last one added wins.

    Survivors keep the position at which their key was first seen.
    """

    def __init__(self) -> None:
        self._records: dict[RecordKey, dict[str, Any]] = {}
        self.duplicates = 0

    def add(self, record: dict[str, Any]) -> DeduplicationResult:
        key = record_key(record)
        replaced = key in self._records
        if replaced:
            self.duplicates += 1
        self._records[key] = record
        return DeduplicationResult(key=key, replaced=replaced)

    def add_many(self, records: Iterable[dict[str, Any]]) -> None:
        for record in records:
            self.add(record)

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> list[dict[str, Any]]:
        return list(self._records.values())


__all__ = ["DeduplicationResult", "RecordDeduplicator", "RecordKey", "record_key"]
