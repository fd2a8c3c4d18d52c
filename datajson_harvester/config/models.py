"""Pydantic models used across the harvester configuration flow."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_DIRECTORY_URL = "https://gsa.github.io/data/dotgov-domains/2014-12-01-full.csv"


class HarvestConfig(BaseModel):
    """Global controls shared by every pipeline stage."""

    directory_url: str = DEFAULT_DIRECTORY_URL
    domain_type: str = "Federal Agency"
    inventory_path: str = "/data.json"
    www_fallback: bool = True
    probe_workers: int = 5
    download_workers: int = 4
    request_timeout: float = Field(default=120.0, description="Per-request timeout in seconds.")
    min_body_length: int = Field(
        default=20,
        description="Downloaded inventories must be longer than this many characters.",
    )
    user_agent: str | None = "datajson-harvester/0.1"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    progress_bar: bool = True

    @field_validator("probe_workers", "download_workers")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Worker pools need at least one worker")
        return value

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be > 0")
        return value

    @field_validator("min_body_length")
    @classmethod
    def _non_negative_threshold(cls, value: int) -> int:
        if value < 0:
            raise ValueError("min_body_length must be >= 0")
        return value

    @field_validator("inventory_path", mode="before")
    @classmethod
    def _coerce_inventory_path(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("inventory_path cannot be empty")
        return text if text.startswith("/") else f"/{text}"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


__all__ = ["DEFAULT_DIRECTORY_URL", "HarvestConfig"]
