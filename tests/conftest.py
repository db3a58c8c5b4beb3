"""Shared fixtures: a controllable clock and a fake upstream API."""

import asyncio
import json
from typing import Any, Optional

import httpx
import pytest

from staffdash.core.cache import CacheStore
from staffdash.core.context import DataContext
from staffdash.core.http_client import ApiClient


class FakeClock:
    def __init__(self, t: float = 1_000.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


class FakeUpstream:
    """
    Answers GETs from a route table and records every request.
    A route can be held open with gate(path) until the returned event is set.
    """

    def __init__(self):
        self.routes: dict[str, Any] = {}
        self.calls: list[httpx.Request] = []
        self._gates: dict[str, asyncio.Event] = {}

    def ok(self, path: str, data: Any) -> None:
        self.routes[path] = (200, {"success": True, "data": data})

    def reply(self, path: str, status: int = 200, body: Any = None, raw: Optional[bytes] = None) -> None:
        self.routes[path] = (status, raw if raw is not None else body)

    def fail(self, path: str, exc: Exception) -> None:
        self.routes[path] = exc

    def gate(self, path: str) -> asyncio.Event:
        ev = asyncio.Event()
        self._gates[path] = ev
        return ev

    def ungate(self, path: str) -> None:
        """Later requests pass straight through; ones already waiting stay held."""
        self._gates.pop(path, None)

    def count(self, path: str) -> int:
        return sum(1 for r in self.calls if r.url.path == path)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        route = self.routes.get(path)
        if isinstance(route, tuple) and callable(route[1]):
            route = (route[0], route[1](request))
        gate = self._gates.get(path)
        if gate is not None:
            await gate.wait()
        if isinstance(route, Exception):
            raise route
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "not found"})
        status, body = route
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, content=json.dumps(body).encode(),
                              headers={"Content-Type": "application/json"})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def client(upstream):
    return ApiClient("http://upstream.test", headers={}, transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def ctx(client, clock):
    return DataContext(client=client, cache=CacheStore(clock=clock), ttl_s=30)
