"""
Tests for application wiring: health, redirects, middleware, store selection
and the reset command.
"""
import pytest
from fastapi.testclient import TestClient

import scan2order.config as config_mod
from scan2order.app_factory import build_store, create_app
from scan2order.reset_orders import reset_orders
from scan2order.store import JsonFileBackend, SqlBackend


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.json()["store"] == "sql"


def test_root_redirects_to_catalog(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code in (302, 307)
    assert resp.headers["location"] == "/catalog"


def test_root_staff_mode_redirects_to_board(client):
    resp = client.get("/?mode=staff", follow_redirects=False)
    assert resp.headers["location"] == "/staff/orders"


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_request_id_is_generated(client):
    assert client.get("/health").headers["X-Request-ID"]


def test_lifespan_starts_and_stops_timers(sql_store, monkeypatch):
    monkeypatch.setattr(config_mod, "SWEEP_INTERVAL_SECONDS", 60)
    app = create_app(store=sql_store)

    with TestClient(app):
        assert all(timer.running for timer in app.state.timers)
    assert not any(timer.running for timer in app.state.timers)


class TestBuildStore:
    def test_json_backend(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_mod, "ORDERS_JSON_PATH", str(tmp_path / "orders.json"))
        store = build_store("json")
        assert isinstance(store.backend, JsonFileBackend)

    def test_sql_backend(self, monkeypatch):
        monkeypatch.setattr(config_mod, "DATABASE_URL", "sqlite:///:memory:")
        store = build_store("sql")
        assert isinstance(store.backend, SqlBackend)
        store.backend.close()

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_store("redis")


def test_reset_orders_wipes_store(json_store, make_draft, capsys):
    json_store.create(make_draft())
    json_store.create(make_draft())

    reset_orders(json_store)

    assert json_store.list_all() == []
    assert json_store.create(make_draft()) == "Q-001"
    assert "cleared" in capsys.readouterr().out
