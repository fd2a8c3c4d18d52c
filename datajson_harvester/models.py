"""Domain models flowing between pipeline stages."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

_WHITESPACE = re.compile(r"\s")


def slugify_domain(domain_name: str) -> str:
    """Return the cache key for a domain: lower-cased, trimmed, inner whitespace as ``-``."""

    return _WHITESPACE.sub("-", domain_name.strip().lower())


class DomainCandidate(BaseModel):
    """A row of the .gov directory CSV.

    Field aliases match the directory's column headers so that persisted
    lists keep the upstream vocabulary. Columns the pipeline does not use
    (city, state, ...) are carried along as extras.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    domain_name: str = Field(alias="Domain Name")
    domain_type: str = Field(default="", alias="Domain Type")
    agency: str = Field(default="", alias="Agency")
    slug: str = Field(default="", alias="id")

    @model_validator(mode="before")
    @classmethod
    def _derive_slug(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("id") or data.get("slug"):
            return data
        name = data.get("Domain Name", data.get("domain_name"))
        if isinstance(name, str):
            data = dict(data)
            data["id"] = slugify_domain(name)
        return data

    @property
    def domain(self) -> str:
        return self.domain_name.strip().lower()

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class InventoryReference(DomainCandidate):
    """A candidate whose probe resolved to an inventory URL."""

    data_url: str = Field(alias="Data URL")

    @classmethod
    def from_candidate(cls, candidate: DomainCandidate, data_url: str) -> "InventoryReference":
        payload = candidate.to_row()
        payload["Data URL"] = data_url
        return cls.model_validate(payload)


__all__ = ["DomainCandidate", "InventoryReference", "slugify_domain"]
