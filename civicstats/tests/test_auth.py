from __future__ import annotations

from fastapi.testclient import TestClient

from civicstats.app import app
from civicstats.auth.config import AuthConfig
from civicstats.auth.users import authenticate, seed_users

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


# ── Login / Logout ───────────────────────────────────────────────────────


def test_login_success_user():
    resp = client.post("/auth/login", json={"username": "user", "password": "user123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"] == {"username": "user", "role": "user"}


def test_login_success_admin():
    resp = client.post("/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"username": "admin", "password": "wrong"})
    assert resp.status_code == 401


def test_login_unknown_user():
    resp = client.post("/auth/login", json={"username": "nobody", "password": "x"})
    assert resp.status_code == 401


def test_login_rejects_blank_fields():
    resp = client.post("/auth/login", json={"username": "", "password": ""})
    assert resp.status_code == 422


def test_auth_me_when_logged_in():
    _login_user(client)
    resp = client.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["username"] == "user"


def test_auth_me_not_logged_in():
    c = TestClient(app)  # fresh client, no session
    resp = c.get("/auth/me")
    assert resp.status_code == 401


def test_logout():
    _login_user(client)
    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["status"] == "logged_out"
    resp = client.get("/auth/me")
    assert resp.status_code == 401


# ── Route protection ─────────────────────────────────────────────────────


def test_cache_clear_requires_login():
    c = TestClient(app)
    assert c.post("/cache/clear").status_code == 401


def test_cache_stats_requires_admin():
    c = TestClient(app)
    _login_user(c)
    assert c.get("/cache/stats").status_code == 403


def test_cache_refresh_requires_admin():
    c = TestClient(app)
    _login_user(c)
    assert c.post("/cache/refresh/business").status_code == 403


def test_cache_stats_allowed_for_admin():
    c = TestClient(app)
    _login_admin(c)
    resp = c.get("/cache/stats")
    assert resp.status_code == 200
    assert "hit_rate" in resp.json()


# ── Public endpoints stay public ─────────────────────────────────────────


def test_health_is_public():
    c = TestClient(app)
    assert c.get("/health").status_code == 200


def test_categories_is_public():
    c = TestClient(app)
    resp = c.get("/categories")
    assert resp.status_code == 200
    assert len(resp.json()) == 7


# ── Account seeding ──────────────────────────────────────────────────────


def test_seed_users_from_config():
    try:
        seed_users(AuthConfig(admin_username="ops", admin_password="s3cret", viewer_username=""))
        assert authenticate("ops", "s3cret") == {"username": "ops", "role": "admin"}
        assert authenticate("admin", "admin123") is None
        assert authenticate("user", "user123") is None
    finally:
        seed_users()
