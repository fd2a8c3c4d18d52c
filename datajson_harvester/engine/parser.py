"""CSV directory and JSON inventory parsing helpers."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ..models import DomainCandidate

_MISSING = object()


@dataclass
class ParsedInventory:
    """Dataset records extracted from one cached inventory document."""

    slug: str
    records: list[Any] = field(default_factory=list)


def load_json(text: str) -> Any:
    """Decode JSON the way agency inventories need it.

    Many published files carry raw control characters inside strings or a
    leading byte-order mark, both of which a strict decoder rejects.
    """

    return json.loads(text.lstrip("\ufeff"), strict=False)


def is_truthy_document(value: Any) -> bool:
    # Objects and arrays count as present even when empty.
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


class Parser:
    """Parse the domain directory and inventory payloads."""

    def parse_directory(self, text: str, domain_type: str) -> list[DomainCandidate]:
        """Return directory rows of ``domain_type`` in file order."""

        reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
        candidates: list[DomainCandidate] = []
        seen: set[str] = set()
        for row in reader:
            if row.get("Domain Type") != domain_type:
                continue
            name = (row.get("Domain Name") or "").strip()
            if not name:
                continue
            cleaned = {key: value or "" for key, value in row.items() if key is not None}
            cleaned.pop("id", None)
            cleaned.pop("slug", None)
            try:
                candidate = DomainCandidate.model_validate(cleaned)
            except ValidationError:
                continue
            # One cache file per slug, so repeated domains keep their first row.
            if candidate.slug in seen:
                continue
            seen.add(candidate.slug)
            candidates.append(candidate)
        return candidates

    def parse_document(self, text: str) -> Any:
        """Return the decoded document, or ``_MISSING`` when it is not valid JSON."""

        try:
            return load_json(text)
        except ValueError:
            return _MISSING

    def looks_like_inventory(self, text: str) -> bool:
        document = self.parse_document(text)
        return document is not _MISSING and is_truthy_document(document)

    def parse_inventory(self, slug: str, text: str) -> ParsedInventory | None:
        """Return the ``dataset`` collection of an inventory or ``None`` if unusable."""

        document = self.parse_document(text)
        if not isinstance(document, dict):
            return None
        dataset = document.get("dataset")
        if not isinstance(dataset, list):
            return None
        return ParsedInventory(slug=slug, records=list(dataset))


__all__ = ["ParsedInventory", "Parser", "is_truthy_document", "load_json"]
