from __future__ import annotations

import httpx
import pytest

from datajson_harvester.config import HarvestConfig
from datajson_harvester.engine.fetcher import FetchError, FetchRequest, Fetcher


def test_fetcher_returns_non_200_responses(harvest_config: HarvestConfig) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing", request=request)

    with Fetcher(harvest_config, transport=httpx.MockTransport(respond)) as fetcher:
        response = fetcher.get("http://agency.gov/data.json")
    assert response.status_code == 404
    assert not response.ok
    assert response.text == "missing"


def test_fetcher_sends_user_agent_and_keeps_bytes(harvest_config: HarvestConfig) -> None:
    captured: dict = {}

    def respond(request: httpx.Request) -> httpx.Response:
        captured["ua"] = request.headers.get("User-Agent")
        return httpx.Response(200, content=b'{"dataset": []}', request=request)

    with Fetcher(harvest_config, transport=httpx.MockTransport(respond)) as fetcher:
        response = fetcher.fetch(FetchRequest(url="http://agency.gov/data.json", timeout=1))
    assert captured["ua"] == harvest_config.user_agent
    assert response.ok
    assert response.content == b'{"dataset": []}'
    assert response.url == "http://agency.gov/data.json"


@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("refused"),
        httpx.ReadTimeout("slow"),
    ],
)
def test_fetcher_wraps_transport_errors(harvest_config: HarvestConfig, error: Exception) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        raise error

    with Fetcher(harvest_config, transport=httpx.MockTransport(respond)) as fetcher:
        with pytest.raises(FetchError) as excinfo:
            fetcher.get("http://down.gov/data.json")
    assert excinfo.value.url == "http://down.gov/data.json"
    assert isinstance(excinfo.value.__cause__, httpx.HTTPError)


def test_fetcher_follows_redirects(harvest_config: HarvestConfig) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.host == "agency.gov":
            return httpx.Response(
                301, headers={"Location": "https://www.agency.gov/data.json"}, request=request
            )
        return httpx.Response(200, text="{}", request=request)

    with Fetcher(harvest_config, transport=httpx.MockTransport(respond)) as fetcher:
        response = fetcher.get("http://agency.gov/data.json")
    assert response.status_code == 200
    assert response.url == "https://www.agency.gov/data.json"
