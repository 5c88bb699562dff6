from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest


def _add_path(p: Path) -> None:
    sys.path.insert(0, str(p))


REPO_ROOT = Path(__file__).resolve().parents[1]

# Make monorepo src trees importable without editable installs.
_add_path(REPO_ROOT / "apps" / "api" / "src")
_add_path(REPO_ROOT / "packages" / "core" / "src")
_add_path(REPO_ROOT / "packages" / "observability" / "src")
_add_path(REPO_ROOT / "packages" / "connectors" / "src")


Route = Any
"""JSON body (200), an int status code, or ``callable(request) -> httpx.Response``."""


class FakeUpstream:
    """
    Records every request and answers from a path -> route table.

    Unknown paths get a 404.
    """

    def __init__(self, routes: dict[str, Route] | None = None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(route):
            return route(request)
        if isinstance(route, int):
            return httpx.Response(route, json={"error": "upstream"})
        return httpx.Response(200, json=route)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def count(self, path: str) -> int:
        return self.paths().count(path)


@pytest.fixture()
def repo_root() -> Path:
    return REPO_ROOT


@pytest.fixture()
def upstream() -> Callable[..., FakeUpstream]:
    def _make(routes: dict[str, Route] | None = None) -> FakeUpstream:
        return FakeUpstream(routes)

    return _make
