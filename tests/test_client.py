import asyncio
from urllib.parse import quote, unquote

import httpx
import pytest
from fastapi.testclient import TestClient

from upsc_portal import api
from upsc_portal.client import AsyncSearchClient, PortalClient, PortalClientError, RemoteViewCounter
from upsc_portal.config import PaperResult, Section, TopicResult
from upsc_portal.controller import SearchController, SearchStatus
from upsc_portal.navigation import NavigationStateMachine
from upsc_portal.views import ViewCounter


def _fake_server():
    counts = {}
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.method, request.url.path, dict(request.url.params)))
        path = request.url.path
        if path == "/api/search":
            return httpx.Response(200, json=[
                {"type": "topic", "id": "t1", "title": "Mughal Empire", "file": "/h.html",
                 "subjectName": "History", "subjectSlug": "history"},
                {"type": "previous-year", "id": "p5", "title": "GS Paper 1", "file": "/p.pdf",
                 "category": "GS", "year": 2023},
            ])
        if path.startswith("/api/views/"):
            raw = request.url.raw_path.decode("ascii").split("?", 1)[0]
            item_id = unquote(raw[len("/api/views/"):])
            if request.method == "POST":
                counts[item_id] = counts.get(item_id, 0) + 1
            return httpx.Response(200, json={"views": counts.get(item_id, 0)})
        if path == "/api/subjects":
            return httpx.Response(200, json=[{"slug": "history", "name": "History", "topics": []}])
        if path == "/api/previous-years":
            return httpx.Response(200, json=[{"year": 2023, "papers": []}])
        return httpx.Response(404, json={"error": "not found"})

    return httpx.MockTransport(handler), requests


def test_search_parses_both_result_kinds():
    transport, requests = _fake_server()
    with PortalClient("http://portal.test", transport=transport) as client:
        results = client.search("mughal")
    assert isinstance(results[0], TopicResult) and results[0].subject_name == "History"
    assert isinstance(results[1], PaperResult) and results[1].year == 2023
    assert requests == [("GET", "/api/search", {"q": "mughal"})]


def test_views_and_catalog_listing():
    transport, _ = _fake_server()
    with PortalClient("http://portal.test/", transport=transport) as client:
        assert client.get_view_count("t1") == 0
        assert client.record_view("t1") == 1
        assert client.record_view("t1") == 2
        assert client.get_view_count("t1") == 2
        assert client.subjects()[0].slug == "history"
        assert client.previous_years()[0].year == 2023


def test_http_error_raises():
    transport, _ = _fake_server()
    with PortalClient("http://portal.test", transport=transport) as client:
        with pytest.raises(PortalClientError):
            client._request("GET", "/api/unknown")


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with PortalClient("http://portal.test", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(PortalClientError):
            client.search("mughal")


def test_remote_view_counter_behind_navigator(catalog):
    transport, requests = _fake_server()
    with PortalClient("http://portal.test", transport=transport) as client:
        nav = NavigationStateMachine(catalog, views=RemoteViewCounter(client))
        nav.open_item("t2")
        assert nav.current_section is Section.VIEWER
        assert nav.views.get("t2") == 1
    assert ("POST", "/api/views/t2", {}) in requests


def test_async_search_against_app(catalog, monkeypatch, scheduler):
    monkeypatch.setattr(api, "_catalog", catalog)
    monkeypatch.setattr(api, "_views", ViewCounter())

    async def scenario():
        search = AsyncSearchClient("http://portal.test", transport=httpx.ASGITransport(app=api.app))
        controller = SearchController(search, scheduler=scheduler)
        controller.input_changed("csat")
        scheduler.fire_all()
        await controller.wait_idle()
        await search.aclose()
        return controller

    controller = asyncio.run(scenario())
    assert controller.status is SearchStatus.RESULTS
    assert [(r.id, r.year) for r in controller.results] == [("p6", 2023)]


@pytest.mark.parametrize("item_id", ["q#1", "q?x=1", "a/b", "50%", "t 1"])
def test_view_ids_with_url_syntax_are_counted_verbatim(item_id):
    transport, requests = _fake_server()
    with PortalClient("http://portal.test", transport=transport) as client:
        counter = RemoteViewCounter(client)
        assert counter.record(item_id) == 1
        assert counter.record(item_id) == 2
        assert counter.get(item_id) == 2
        assert client.get_view_count(item_id[:1]) == 0
    assert all(params == {} for _, _, params in requests)


@pytest.mark.parametrize("item_id", ["q#1", "a/b", "50%"])
def test_escaped_view_ids_reach_the_app_intact(item_id, monkeypatch):
    views = ViewCounter()
    monkeypatch.setattr(api, "_views", views)
    http = TestClient(api.app)
    path = "/api/views/" + quote(item_id, safe="")

    assert http.post(path).json() == {"views": 1}
    assert http.get(path).json() == {"views": 1}
    assert views.snapshot() == {item_id: 1}
