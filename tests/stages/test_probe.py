from __future__ import annotations

import json

from conftest import directory_csv, inventory_body

from datajson_harvester.engine import Parser
from datajson_harvester.infra import InventoryCache
from datajson_harvester.logging_conf import stage_logger
from datajson_harvester.models import DomainCandidate
from datajson_harvester.stages import probe_inventories
from datajson_harvester.stages.probe import candidate_urls, load_inventory_list, probe_candidate


def _candidate(domain: str = "agency.gov") -> DomainCandidate:
    return DomainCandidate.model_validate(
        {"Domain Name": domain, "Domain Type": "Federal Agency", "Agency": "Agency"}
    )


def _probe(candidate, harvest_config, locator, fetcher):
    return probe_candidate(
        candidate,
        harvest_config,
        fetcher,
        Parser(),
        InventoryCache(locator.agencies_dir),
        stage_logger("probe"),
    )


def test_candidate_urls(harvest_config) -> None:
    assert candidate_urls(_candidate("Agency.GOV"), harvest_config) == [
        "http://agency.gov/data.json",
        "http://www.agency.gov/data.json",
    ]
    no_www = harvest_config.model_copy(update={"www_fallback": False})
    assert candidate_urls(_candidate(), no_www) == ["http://agency.gov/data.json"]


def test_probe_found_on_bare_domain(harvest_config, locator, fetcher, handler) -> None:
    body = inventory_body()
    handler.routes["http://agency.gov/data.json"] = body

    reference = _probe(_candidate(), harvest_config, locator, fetcher)

    assert reference is not None
    assert reference.data_url == "http://agency.gov/data.json"
    assert handler.calls == ["http://agency.gov/data.json"]
    assert (locator.agencies_dir / "agency.gov.data.json").read_text(encoding="utf-8") == body


def test_probe_falls_back_to_www(harvest_config, locator, fetcher, handler) -> None:
    handler.routes["http://agency.gov/data.json"] = (404, "not found")
    handler.routes["http://www.agency.gov/data.json"] = inventory_body()

    reference = _probe(_candidate(), harvest_config, locator, fetcher)

    assert reference is not None
    assert reference.data_url == "http://www.agency.gov/data.json"
    assert handler.calls == ["http://agency.gov/data.json", "http://www.agency.gov/data.json"]


def test_probe_rejects_invalid_json_then_gives_up(harvest_config, locator, fetcher, handler) -> None:
    handler.routes["http://agency.gov/data.json"] = "<html>soft 404</html>"

    assert _probe(_candidate(), harvest_config, locator, fetcher) is None
    assert len(handler.calls) == 2
    assert not (locator.agencies_dir / "agency.gov.data.json").exists()


def test_probe_inventories_persists_resolved_rows(
    harvest_config, locator, fetcher, handler, thread_pool
) -> None:
    locator.directory_csv.write_text(
        directory_csv(
            [
                ("one.gov", "Federal Agency", "One"),
                ("city.gov", "City", "City"),
                ("two.gov", "Federal Agency", "Two"),
                ("three.gov", "Federal Agency", "Three"),
            ]
        ),
        encoding="utf-8",
    )
    handler.routes["http://one.gov/data.json"] = inventory_body()
    handler.routes["http://www.three.gov/data.json"] = inventory_body()

    result = probe_inventories(harvest_config, locator, fetcher, thread_pool)

    assert result.probed == 3
    assert result.unresolved == 1
    assert [r.slug for r in result.references] == ["one.gov", "three.gov"]
    assert not any("city.gov" in url for url in handler.calls)
    rows = json.loads(locator.inventory_list.read_text(encoding="utf-8"))
    assert [row["Data URL"] for row in rows] == [
        "http://one.gov/data.json",
        "http://www.three.gov/data.json",
    ]
    assert rows[0]["id"] == "one.gov"
    assert rows[0]["Agency"] == "One"
    assert rows[0]["State"] == "DC"
    assert load_inventory_list(locator.inventory_list) == result.references


def test_probe_inventories_reuses_existing_list(
    harvest_config, locator, fetcher, handler, thread_pool, make_reference
) -> None:
    locator.inventory_list.write_text(
        json.dumps([make_reference("one.gov", "One").to_row()]), encoding="utf-8"
    )

    result = probe_inventories(harvest_config, locator, fetcher, thread_pool)

    assert result.reused
    assert [r.slug for r in result.references] == ["one.gov"]
    assert handler.calls == []
