"""HTTP fetching over a shared httpx client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

import httpx
import structlog

from ..config import HarvestConfig


class FetchError(RuntimeError):
    """Raised when a request fails before an HTTP response is received."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


@dataclass(slots=True)
class FetchRequest:
    """Input for the fetcher."""

    url: str
    method: str = "GET"
    headers: dict[str, str] | None = None
    timeout: float | None = None


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    content: bytes = field(repr=False)
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    @property
    def text(self) -> str:
        if self.raw is not None:
            return self.raw.text
        return self.content.decode("utf-8", errors="replace")


class Fetcher:
    """Issue requests with the configured timeout and user agent.

    Any HTTP status is returned to the caller; only transport failures
    (DNS, connection refused, timeouts, protocol errors) raise ``FetchError``.
    """

    def __init__(
        self,
        config: HarvestConfig,
        logger: structlog.BoundLogger | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("datajson_harvester.fetcher")
        self._client = httpx.Client(
            follow_redirects=True,
            timeout=config.request_timeout,
            headers={"User-Agent": config.user_agent} if config.user_agent else None,
            transport=transport,
        )

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch(self, request: FetchRequest) -> FetchResponse:
        timeout = request.timeout or self.config.request_timeout
        try:
            response = self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                timeout=timeout,
            )
        except httpx.HTTPError as exc:
            self.logger.debug("fetch_error", url=request.url, error=repr(exc))
            raise FetchError(request.url, str(exc) or exc.__class__.__name__) from exc
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            raw=response,
        )

    def get(self, url: str) -> FetchResponse:
        return self.fetch(FetchRequest(url=url))


__all__ = ["FetchError", "FetchRequest", "FetchResponse", "Fetcher"]
