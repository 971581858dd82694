import pytest
from fastapi.testclient import TestClient

import scan2order.config as config_mod
from scan2order.app_factory import create_app
from scan2order.db import create_db_engine, create_session_factory
from scan2order.domain import OrderDraft, OrderItem, OrderStatus
from scan2order.routes import limiter
from scan2order.services.cart_sessions import CartSessionCache
from scan2order.store import JsonFileBackend, OrderStore, SqlBackend

# Test staff PIN
TEST_STAFF_PIN = "4321"

# 2025-06-15 12:00:00 UTC, far enough from New Year in any timezone
T0 = 1_749_988_800_000


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sql_store(clock):
    """OrderStore over an in-memory SQLite database (StaticPool)."""
    engine = create_db_engine("sqlite:///:memory:")
    store = OrderStore(SqlBackend(create_session_factory(engine)), clock=clock)
    yield store
    store.backend.close()


@pytest.fixture
def json_store(tmp_path, clock):
    """OrderStore over a JSON document in a temp directory."""
    return OrderStore(JsonFileBackend(tmp_path / "orders.json"), clock=clock)


@pytest.fixture(params=["sql", "json"])
def store(request, clock, tmp_path):
    """The same test run against both backends."""
    if request.param == "sql":
        engine = create_db_engine("sqlite:///:memory:")
        backend = SqlBackend(create_session_factory(engine))
    else:
        backend = JsonFileBackend(tmp_path / "orders.json")
    store = OrderStore(backend, clock=clock)
    yield store
    backend.close()


@pytest.fixture
def make_draft():
    """Factory for a minimal one-line order draft."""

    def _make(pickup_name="Aisha", expires_at=None, status=OrderStatus.NEW, total=12.0):
        return OrderDraft(
            items=[OrderItem(sku="souffle-van", name="Soufflé - Vanilla", unit_price=12.0, qty=1)],
            total=total,
            status=status,
            expires_at=expires_at,
            pickup_name=pickup_name,
        )

    return _make


@pytest.fixture
def carts():
    return CartSessionCache()


@pytest.fixture
def app(sql_store, carts, monkeypatch):
    """FastAPI app over the in-memory SQL store, timers off, PIN configured."""
    monkeypatch.setattr(config_mod, "STAFF_PIN", TEST_STAFF_PIN)
    monkeypatch.setattr(config_mod, "SUBMIT_DELAY_MS", 0)

    # Rate limiting is exercised explicitly in test_api_orders
    limiter.enabled = False
    limiter.reset()

    return create_app(store=sql_store, carts=carts, background_tasks=False)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def staff_headers():
    """Header carrying the staff PIN."""
    return {"X-Staff-PIN": TEST_STAFF_PIN}


@pytest.fixture
def cart_session(client):
    """Session id of a fresh cart with one Chocolate soufflé in it."""
    session_id = client.post("/cart").json()["sessionId"]
    client.post(f"/cart/{session_id}/flavors/cho")
    return session_id
