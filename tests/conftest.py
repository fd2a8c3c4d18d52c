"""Pytest configuration providing shared fixtures for the harvester."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Iterable

import httpx
import pytest

from datajson_harvester.config import ConfigLocator, ConfigRepository, HarvestConfig
from datajson_harvester.engine import Fetcher, ThreadPoolManager
from datajson_harvester.models import DomainCandidate, InventoryReference

DIRECTORY_HEADER = "Domain Name,Domain Type,Agency,City,State"


def directory_csv(rows: Iterable[tuple[str, str, str]]) -> str:
    lines = [DIRECTORY_HEADER]
    for domain, domain_type, agency in rows:
        lines.append(f"{domain},{domain_type},{agency},Washington,DC")
    return "\n".join(lines) + "\n"


def inventory_body(*records: Any) -> str:
    return json.dumps({"conformsTo": "https://project-open-data.cio.gov/v1.1/schema", "dataset": list(records)})


def dataset(identifier: str, publisher: str, title: str = "T", access: str = "public", **extra: Any) -> dict:
    record = {
        "identifier": identifier,
        "publisher": {"name": publisher},
        "title": title,
        "description": f"{title} description",
        "accessLevel": access,
    }
    record.update(extra)
    return record


class RecordingHandler:
    """MockTransport handler returning canned responses keyed by URL."""

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            raise httpx.ConnectError("unreachable", request=request)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, tuple):
            status, body = route
            return httpx.Response(status, text=body, request=request)
        return httpx.Response(200, text=route, request=request)


@pytest.fixture
def harvest_config() -> HarvestConfig:
    return HarvestConfig(request_timeout=5, progress_bar=False)


@pytest.fixture
def locator(tmp_path: Path) -> ConfigLocator:
    return ConfigLocator(project_root=tmp_path)


@pytest.fixture
def repository(locator: ConfigLocator, harvest_config: HarvestConfig) -> ConfigRepository:
    repo = ConfigRepository(locator)
    repo.save_config(harvest_config)
    return repo


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def fetcher(harvest_config: HarvestConfig, handler: RecordingHandler) -> Iterable[Fetcher]:
    client = Fetcher(harvest_config, transport=httpx.MockTransport(handler))
    yield client
    client.close()


@pytest.fixture
def thread_pool() -> Iterable[ThreadPoolManager]:
    manager = ThreadPoolManager(default_workers=2)
    yield manager
    manager.shutdown()


@pytest.fixture
def make_reference() -> Callable[..., InventoryReference]:
    def _builder(domain: str, agency: str, data_url: str | None = None) -> InventoryReference:
        candidate = DomainCandidate.model_validate(
            {"Domain Name": domain, "Domain Type": "Federal Agency", "Agency": agency}
        )
        return InventoryReference.from_candidate(
            candidate, data_url or f"http://{candidate.domain}/data.json"
        )

    return _builder
