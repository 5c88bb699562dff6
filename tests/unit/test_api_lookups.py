from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from linkedlookup_api import create_app
from linkedlookup_core import Settings

MIME_TABLE = {"application/json": {"source": "iana", "extensions": ["json"]}}


def _app(routes: dict | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path in (routes or {}):
            return httpx.Response(200, json=routes[request.url.path])
        return httpx.Response(404)

    app = create_app(Settings(_env_file=None, origin_overrides={"mimetypes": "https://mime.test/db.json"}))
    app.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return app


def test_healthz_ok() -> None:
    with TestClient(_app()) as client:
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


def test_version_reports_service_name(monkeypatch) -> None:
    monkeypatch.setenv("GIT_SHA", "abc123def456")
    with TestClient(_app()) as client:
        body = client.get("/version").json()
        assert body["name"] == "linkedlookup-api"
        assert body["git_sha"] == "abc123def456"
        assert body["lookups"] == 12
        assert "build_time" in body


def test_lifespan_owns_one_shared_upstream_client() -> None:
    app = create_app(Settings(_env_file=None))
    with TestClient(app):
        shared = app.state.http_client
        assert isinstance(shared, httpx.AsyncClient)
        assert not shared.is_closed
    assert shared.is_closed
    assert app.state.http_client is None


def test_lifespan_leaves_injected_client_open() -> None:
    app = _app()
    injected = app.state.http_client
    with TestClient(app):
        assert app.state.http_client is injected
    assert not injected.is_closed


def test_list_lookups() -> None:
    with TestClient(_app()) as client:
        sources = {s["name"]: s for s in client.get("/lookups").json()}
        assert sources["crossref"] == {
            "name": "crossref",
            "default_type": "ScholarlyArticle",
            "default_limit": 10,
            "min_query_length": 3,
        }
        assert "aopwikiRelationships" in sources


def test_lookup_returns_entities_and_echoes_request_id() -> None:
    with TestClient(_app({"/db.json": MIME_TABLE})) as client:
        resp = client.get(
            "/lookups/mimetypes",
            params={"q": "json", "fields": "name, extensions"},
            headers={"x-request-id": "req-123"},
        )
        assert resp.status_code == 200
        assert resp.headers["x-request-id"] == "req-123"
        assert resp.json() == {
            "source": "mimetypes",
            "query": "json",
            "count": 1,
            "results": [
                {
                    "name": "application/json",
                    "extensions": [".json"],
                    "@id": "urn:mimetype:application/json",
                    "@type": "MediaType",
                }
            ],
        }


def test_short_query_is_an_empty_result() -> None:
    with TestClient(_app()) as client:
        body = client.get("/lookups/ror", params={"q": "a"}).json()
        assert body == {"source": "ror", "query": "a", "count": 0, "results": []}


def test_unknown_source_is_404() -> None:
    with TestClient(_app()) as client:
        resp = client.get("/lookups/nope", params={"q": "anything"})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Unknown lookup source: nope"


def test_limit_is_validated() -> None:
    with TestClient(_app()) as client:
        assert client.get("/lookups/ror", params={"q": "xx", "limit": -1}).status_code == 422
