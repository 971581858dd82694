"""
Tests for customer order submission and lookup.
"""
import inspect

import scan2order.config as config_mod
import scan2order.routes.orders as orders_mod
from scan2order.routes import limiter

T0 = 1_749_988_800_000  # 2025-06-15 12:00 UTC


def _submit(client, session_id, **fields):
    body = {"sessionId": session_id, "pickupName": "Aisha"}
    body.update(fields)
    return client.post("/orders", json=body)


def test_submit_order_success(client, cart_session, carts):
    resp = _submit(client, cart_session, note="extra jiggly", marketingOptIn=True)

    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] == "Q-001"
    assert data["status"] == "New"
    assert data["total"] == 13.5
    assert data["pickupName"] == "Aisha"
    assert data["note"] == "extra jiggly"
    assert data["marketingOptIn"] is True
    assert data["createdAt"] == T0
    assert data["expiresAt"] == T0 + 600_000
    assert data["items"][0]["sku"] == "souffle-cho"

    # The cart is emptied after a successful submission
    assert carts.get(cart_session) == []


def test_submit_accepts_snake_case_fields(client, cart_session):
    resp = client.post(
        "/orders",
        json={"session_id": cart_session, "pickup_name": "Ben"},
    )
    assert resp.status_code == 201
    assert resp.json()["pickupName"] == "Ben"


def test_empty_cart_is_400_and_nothing_stored(client, sql_store):
    session_id = client.post("/cart").json()["sessionId"]
    resp = _submit(client, session_id)

    assert resp.status_code == 400
    assert "cart is empty" in resp.json()["detail"]
    assert sql_store.list_all() == []


def test_blank_name_is_400_and_cart_kept(client, cart_session, carts, sql_store):
    resp = _submit(client, cart_session, pickupName="   ")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please enter a pickup name."
    assert sql_store.list_all() == []
    assert len(carts.get(cart_session)) == 1


def test_invalid_phone_is_400(client, cart_session):
    resp = _submit(client, cart_session, phone="abc")
    assert resp.status_code == 400


def test_phone_is_normalized(client, cart_session):
    resp = _submit(client, cart_session, phone="+1 201-555-1234")
    assert resp.json()["phone"] == "+12015551234"


def test_get_order(client, cart_session):
    _submit(client, cart_session)
    resp = client.get("/orders/Q-001")
    assert resp.status_code == 200
    assert resp.json()["pickupName"] == "Aisha"


def test_get_unknown_order_is_404(client):
    assert client.get("/orders/Q-999").status_code == 404


def test_rate_limit_returns_429_when_exceeded(client, monkeypatch):
    """Order submissions are throttled per client address."""
    monkeypatch.setattr(config_mod, "RATE_LIMIT_ORDERS", "2 per minute")
    limiter.enabled = True
    limiter.reset()

    try:
        session_id = client.post("/cart").json()["sessionId"]
        # Empty-cart rejections still count against the limit
        assert _submit(client, session_id).status_code == 400
        assert _submit(client, session_id).status_code == 400
        assert _submit(client, session_id).status_code == 429
    finally:
        limiter.enabled = False
        limiter.reset()


def test_rate_limit_can_be_disabled(client, monkeypatch):
    monkeypatch.setattr(config_mod, "RATE_LIMIT_ORDERS", "1 per minute")
    limiter.enabled = False

    session_id = client.post("/cart").json()["sessionId"]
    for _ in range(3):
        assert _submit(client, session_id).status_code == 400


def test_second_submit_of_same_cart_is_rejected(client, cart_session, sql_store):
    assert _submit(client, cart_session).status_code == 201

    resp = _submit(client, cart_session)
    assert resp.status_code == 400
    assert "cart is empty" in resp.json()["detail"]
    assert [order.id for order in sql_store.list_all()] == ["Q-001"]


def test_submit_runs_in_threadpool():
    # Store and cart access block, so the endpoint must not run on the event loop
    assert not inspect.iscoroutinefunction(orders_mod.place_order)


def test_submit_delay_sleeps_before_writing(client, cart_session, monkeypatch):
    slept = []
    monkeypatch.setattr(config_mod, "SUBMIT_DELAY_MS", 250)
    monkeypatch.setattr(orders_mod.time, "sleep", slept.append)

    assert _submit(client, cart_session).status_code == 201
    assert 0.25 in slept
