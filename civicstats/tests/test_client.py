from __future__ import annotations

import httpx
import pytest

from civicstats.cache.config import CacheConfig
from civicstats.client.cache import ClientCache
from civicstats.client.dashboard import DashboardClient, DashboardError
from civicstats.models import Category


class _Server:
    """Counts requests and returns a new payload version every time."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.paths: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "No data available"})
        return httpx.Response(200, json={"version": len(self.paths), "path": request.url.path})


def _client(server: _Server, clock) -> DashboardClient:
    http = httpx.Client(base_url="http://dashboard.test", transport=httpx.MockTransport(server))
    return DashboardClient(http_client=http, cache=ClientCache(CacheConfig(client_ttl_seconds=60), clock=clock))


def test_overview_is_served_from_client_cache(clock):
    server = _Server()
    client = _client(server, clock)

    first = client.overview(Category.BUSINESS)
    second = client.overview("business")

    assert first == second == {"version": 1, "path": "/business/overview"}
    assert server.paths == ["/business/overview"]


def test_skip_cache_always_hits_server(clock):
    server = _Server()
    client = _client(server, clock)

    client.overview(Category.HEALTH)
    fresh = client.overview(Category.HEALTH, skip_cache=True)

    assert fresh["version"] == 2
    assert client.overview(Category.HEALTH)["version"] == 2


def test_refresh_clears_key_and_bypasses_cache(clock):
    server = _Server()
    client = _client(server, clock)
    client.overview(Category.PUBLIC_SAFETY)
    client.overview(Category.HOUSING)

    refreshed = client.refresh("PUBLIC_SAFETY")

    assert refreshed == {"version": 3, "path": "/safety/overview"}
    assert client.overview(Category.HOUSING)["version"] == 2
    assert server.paths == ["/safety/overview", "/housing/overview", "/safety/overview"]


def test_cache_expires_after_client_ttl(clock):
    server = _Server()
    client = _client(server, clock)
    client.view("education:boroughs")
    clock.advance(60)
    assert client.view("education:boroughs")["version"] == 2
    assert server.paths == ["/education/boroughs", "/education/boroughs"]


def test_error_responses_raise_and_are_not_cached(clock):
    server = _Server(status_code=404)
    client = _client(server, clock)

    with pytest.raises(DashboardError) as excinfo:
        client.overview(Category.ENVIRONMENT)
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "No data available"
    assert client.cache.keys() == []


def test_non_json_error_body_uses_reason_phrase(clock):
    def gateway_page(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html><body>Bad Gateway</body></html>")

    http = httpx.Client(base_url="http://dashboard.test", transport=httpx.MockTransport(gateway_page))
    client = DashboardClient(http_client=http, cache=ClientCache(clock=clock))

    with pytest.raises(DashboardError) as excinfo:
        client.overview(Category.TRANSPORTATION)
    assert excinfo.value.status_code == 502
    assert excinfo.value.message == "Bad Gateway"


def test_client_requires_a_target():
    with pytest.raises(ValueError):
        DashboardClient()
