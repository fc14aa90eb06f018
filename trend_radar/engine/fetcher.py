"""Bounded HTTP GET + JSON decoding for upstream sources."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict

import httpx
import structlog

from ..errors import MalformedResponse, SourceUnavailable
from ..infra import UserAgentPool

DEFAULT_TIMEOUT = 10.0


@dataclass(slots=True)
class FetchRequest:
    """Input for the fetcher."""

    source: str
    url: str
    headers: dict[str, str] | None = None
    params: dict[str, Any] | None = None
    timeout: float | None = None


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)

    def json(self, source: str) -> Any:
        try:
            return json.loads(self.text)
        except ValueError as exc:
            raise MalformedResponse(source, f"invalid JSON from {self.url}") from exc


class Fetcher:
    """Thin wrapper over a shared ``httpx.Client`` with per-call timeouts."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        ua_pool: UserAgentPool | None = None,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.timeout = timeout
        self.ua_pool = ua_pool
        self.logger = logger or structlog.get_logger("trend_radar.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True, timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(self, request: FetchRequest) -> FetchResponse:
        headers = dict(request.headers or {})
        if self.ua_pool is not None and "User-Agent" not in headers:
            user_agent = self.ua_pool.get()
            if user_agent:
                headers["User-Agent"] = user_agent
        timeout = request.timeout or self.timeout
        try:
            response = self._client.get(
                request.url, params=request.params, headers=headers, timeout=timeout
            )
        except httpx.TimeoutException as exc:
            raise SourceUnavailable(request.source, f"timed out after {timeout}s") from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailable(request.source, f"request failed: {exc}") from exc

        self.logger.debug(
            "fetch_response",
            source=request.source,
            url=request.url,
            status=response.status_code,
        )
        if self._is_failure(response):
            raise SourceUnavailable(
                request.source, f"unexpected status {response.status_code}"
            )
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
            raw=response,
        )

    def get_json(self, request: FetchRequest) -> Any:
        return self.fetch(request).json(request.source)

    @staticmethod
    def _is_failure(response: httpx.Response) -> bool:
        return not 200 <= response.status_code < 300


__all__ = ["DEFAULT_TIMEOUT", "FetchRequest", "FetchResponse", "Fetcher"]
