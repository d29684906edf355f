from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from civicstats.app import create_app
from civicstats.cache.memory import MemoryCache
from civicstats.models import Category
from conftest import FakeGateway, make_orchestrator

CERTIFIED = [
    {"borough": "Brooklyn", "certification": "MBE"},
    {"borough": "Manhattan", "certification": "WBE"},
]
COMPLAINTS = [{"law_cat_cd": "FELONY", "boro_nm": "BRONX", "ofns_desc": "BURGLARY"}]


class BrokenGateway(FakeGateway):
    async def fetch(self, dataset, limit=None):
        raise RuntimeError("database password is hunter2")


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway({"certified": CERTIFIED, "complaints": COMPLAINTS})


@pytest.fixture
def orchestrator(gateway, snapshot_store):
    return make_orchestrator(gateway, snapshot_store, MemoryCache())


@pytest.fixture
def client(orchestrator) -> TestClient:
    return TestClient(create_app(orchestrator))


# ── Overviews ────────────────────────────────────────────────────────────


def test_overview_returns_aggregate_with_timestamp(client, gateway):
    resp = client.get("/business/overview")
    assert resp.status_code == 200
    body = resp.json()
    assert body["stats"]["total"] == 2
    assert [r["borough"] for r in body["breakdowns"]["boroughs"]] == ["Brooklyn", "Manhattan"]
    assert datetime.fromisoformat(body["last_updated"]).tzinfo is not None


def test_second_overview_read_is_a_snapshot_hit(client, gateway):
    first = client.get("/safety/overview").json()
    calls = len(gateway.calls)
    second = client.get("/safety/overview").json()
    assert len(gateway.calls) == calls
    assert first == second


def test_overview_without_any_data_is_404(client):
    resp = client.get("/transportation/overview")
    assert resp.status_code == 404
    assert resp.json() == {"error": "No data available"}


def test_unexpected_failure_is_500_without_detail(snapshot_store):
    c = TestClient(create_app(make_orchestrator(BrokenGateway(), snapshot_store)))
    resp = c.get("/health/overview")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch health data"}
    assert "hunter2" not in resp.text


@pytest.mark.parametrize(
    "path", ["/education/overview", "/housing/overview", "/environment/overview"]
)
def test_every_domain_route_is_wired(client, path):
    assert client.get(path).status_code == 404


# ── Derived views ────────────────────────────────────────────────────────


def test_business_boroughs_view(client, orchestrator):
    resp = client.get("/business/boroughs")
    assert resp.status_code == 200
    assert resp.json()["total"] == 2
    assert "business:boroughs" in orchestrator.memory_stats()["keys"]
    assert orchestrator.is_cached(Category.BUSINESS) is None


def test_education_boroughs_without_data(client):
    assert client.get("/education/boroughs").status_code == 404


# ── Categories ───────────────────────────────────────────────────────────


def test_categories_reflect_snapshot_state(client):
    client.get("/business/overview")
    rows = {row["slug"]: row for row in client.get("/categories").json()}
    assert rows["business"]["cached"] is True
    assert rows["business"]["datasets"] == ["certified", "establishments"]
    assert rows["safety"]["category"] == "PUBLIC_SAFETY"
    assert rows["safety"]["cached"] is False
    assert rows["safety"]["last_updated"] is None


# ── Cache administration ─────────────────────────────────────────────────


def test_clear_one_category(client):
    client.get("/business/overview")
    client.get("/safety/overview")
    _login_admin(client)

    resp = client.post("/cache/clear", params={"category": "business"})

    assert resp.status_code == 200
    assert resp.json() == {"status": "cleared", "cleared_keys": ["BUSINESS"], "cleared_count": 1, "cleared_views": 0}
    cached = {row["slug"]: row["cached"] for row in client.get("/categories").json()}
    assert cached["business"] is False
    assert cached["safety"] is True


def test_clear_all(client):
    client.get("/business/overview")
    client.get("/business/boroughs")
    _login_admin(client)

    body = client.post("/cache/clear").json()

    assert body["cleared_count"] == 1
    assert body["cleared_views"] == 1


def test_clear_unknown_category_is_400(client):
    _login_admin(client)
    assert client.post("/cache/clear", params={"category": "weather"}).status_code == 400


def test_refresh_recomputes(client, gateway):
    client.get("/business/overview")
    _login_admin(client)
    gateway.data["certified"] = CERTIFIED + [{"borough": "Queens", "certification": "DBE"}]

    resp = client.post("/cache/refresh/BUSINESS")

    assert resp.status_code == 200
    assert resp.json()["stats"]["total"] == 3
    assert client.get("/business/overview").json()["stats"]["total"] == 3


def test_refresh_without_data_is_404(client):
    _login_admin(client)
    assert client.post("/cache/refresh/environment").status_code == 404


def test_cache_stats(client):
    client.get("/business/overview")
    client.get("/business/boroughs")
    client.get("/business/boroughs")
    _login_admin(client)

    body = client.get("/cache/stats").json()

    assert body["cache_size"] == 1
    assert body["cached_keys"] == ["business:boroughs"]
    assert body["hits"] == 1
    assert [s["category"] for s in body["snapshots"]] == ["BUSINESS"]
