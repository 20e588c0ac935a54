from __future__ import annotations

"""
HTTP client for a running portal server.

Used by the CLI (``--url``) and by front ends that keep the catalog on
the server: :class:`AsyncSearchClient` plugs into
:class:`~upsc_portal.controller.SearchController` as its dispatch
function, and :class:`RemoteViewCounter` stands in for the local
:class:`~upsc_portal.views.ViewCounter` behind the navigator.

Requests use ``httpx`` with connect/read timeouts from config.  Any
transport error or HTTP status >= 400 raises :class:`PortalClientError`;
there are no retries.
"""

from typing import Any, List
from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import TypeAdapter

from .config import (
    HTTP_CONNECT_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
    PORTAL_URL,
    ExamYear,
    Subject,
    ViewCountResponse,
)
from .search import SearchResult

_RESULTS_ADAPTER = TypeAdapter(List[SearchResult])
_SUBJECTS_ADAPTER = TypeAdapter(List[Subject])
_YEARS_ADAPTER = TypeAdapter(List[ExamYear])


class PortalClientError(RuntimeError):
    """Raised when the portal server cannot be reached or answers with an error."""


def _timeout() -> httpx.Timeout:
    return httpx.Timeout(HTTP_READ_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT)


def _views_path(item_id: str) -> str:
    # ids may contain URL syntax (#, ?, /, %); send them as one path segment
    return "/api/views/" + quote(str(item_id), safe="")


def _check(r: httpx.Response) -> Any:
    if r.status_code >= 400:
        raise PortalClientError(f"HTTP {r.status_code} for {r.request.method} {r.request.url}")
    return r.json()


class PortalClient:
    def __init__(self, base_url: str = PORTAL_URL, transport: httpx.BaseTransport | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=_timeout(),
            headers={"User-Agent": HTTP_USER_AGENT},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PortalClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            r = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise PortalClientError(f"{method} {path} failed: {e}") from e
        return _check(r)

    def subjects(self) -> List[Subject]:
        return _SUBJECTS_ADAPTER.validate_python(self._request("GET", "/api/subjects"))

    def previous_years(self) -> List[ExamYear]:
        return _YEARS_ADAPTER.validate_python(self._request("GET", "/api/previous-years"))

    def search(self, text: str) -> List[SearchResult]:
        data = self._request("GET", "/api/search", params={"q": text})
        return _RESULTS_ADAPTER.validate_python(data)

    def record_view(self, item_id: str) -> int:
        data = self._request("POST", _views_path(item_id))
        return ViewCountResponse.model_validate(data).views

    def get_view_count(self, item_id: str) -> int:
        data = self._request("GET", _views_path(item_id))
        return ViewCountResponse.model_validate(data).views


class RemoteViewCounter:
    """``record``/``get`` view-count contract backed by a portal server."""

    def __init__(self, client: PortalClient) -> None:
        self.client = client

    def record(self, item_id: str) -> int:
        return self.client.record_view(item_id)

    def get(self, item_id: str) -> int:
        return self.client.get_view_count(item_id)


class AsyncSearchClient:
    """Awaitable search dispatch for the interactive controller."""

    def __init__(self, base_url: str = PORTAL_URL, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=_timeout(),
            headers={"User-Agent": HTTP_USER_AGENT},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __call__(self, text: str) -> List[SearchResult]:
        try:
            r = await self._client.get("/api/search", params={"q": text})
        except httpx.HTTPError as e:
            raise PortalClientError(f"search {text!r} failed: {e}") from e
        results = _RESULTS_ADAPTER.validate_python(_check(r))
        logger.debug("Remote search {!r}: {} results", text, len(results))
        return results
