"""
Pytest configuration and shared fixtures.

The network boundary is ``httpx.MockTransport``: tests script responses per
(method, path) on ``MockApi`` and inspect the recorded requests.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from scix_client.infrastructure.scix import SciXClient
from scix_client.shared.config import ClientConfig
from scix_client.shared.rate_limiter import RateLimiter

BASE_URL = "https://api.test/v1"
TEST_TOKEN = "test-token"


# ============================================================
# Fake time
# ============================================================


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instantly."""

    def __init__(self, start: float = 1000.0, wall: float = 1_700_000_000.0) -> None:
        self.now = start
        self.wall_offset = wall - start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def wall(self) -> float:
        return self.now + self.wall_offset

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(capacity=5, per=1.0, clock=clock, wall_clock=clock.wall, sleep=clock.sleep)


# ============================================================
# Mock SciX API
# ============================================================


class MockApi:
    """Scripted responses keyed by (method, path below the base URL)."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], httpx.Response | Exception] = {}

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
        text: str | None = None,
    ) -> None:
        if text is not None:
            response = httpx.Response(status, text=text, headers=headers)
        elif json_body is not None:
            response = httpx.Response(status, json=json_body, headers=headers)
        else:
            response = httpx.Response(status, headers=headers)
        self._routes[(method, path)] = response

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self._routes[(method, path)] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v1")
        route = self._routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {request.method} {path}"})
        if isinstance(route, Exception):
            raise route
        return route

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def api() -> MockApi:
    return MockApi()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(token=TEST_TOKEN, base_url=BASE_URL)


@pytest.fixture
async def client(api: MockApi, config: ClientConfig, limiter: RateLimiter):
    http = httpx.AsyncClient(transport=httpx.MockTransport(api.handler))
    scix = SciXClient(config, limiter, http_client=http)
    yield scix
    await scix.close()


# ============================================================
# Sample API payloads
# ============================================================


def make_doc(bibcode: str = "2019ApJ...882L..24A", **overrides: Any) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "bibcode": bibcode,
        "title": ["The Event Horizon Telescope"],
        "author": ["Akiyama, Kazunori", "Alberdi, Antxon", "Alef, Walter", "Asada, Keiichi"],
        "year": "2019",
        "pub": "The Astrophysical Journal",
        "abstract": "We present the first image of a black hole.",
        "doi": ["10.3847/2041-8213/ab0ec7"],
        "identifier": [bibcode, "arXiv:1906.11238", "10.3847/2041-8213/ab0ec7"],
        "doctype": "article",
        "esources": ["EPRINT_PDF", "PUB_PDF"],
        "citation_count": 3200,
        "property": ["REFEREED", "OPENACCESS"],
    }
    doc.update(overrides)
    return doc


def search_payload(*docs: dict[str, Any], num_found: int | None = None) -> dict[str, Any]:
    return {
        "responseHeader": {"status": 0},
        "response": {"numFound": len(docs) if num_found is None else num_found, "start": 0, "docs": list(docs)},
    }
