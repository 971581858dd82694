"""
Tests for the in-memory cart session cache.
"""
from scan2order.cart import add_flavor
from scan2order.catalog import CATALOG
from scan2order.services.cart_sessions import CartSessionCache

VANILLA = CATALOG.get_flavor("van")


class FakeTime:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_new_session_starts_empty():
    cache = CartSessionCache()
    session_id = cache.new_session()
    assert session_id in cache
    assert cache.get(session_id) == []


def test_unknown_session_reads_empty():
    assert CartSessionCache().get("missing") == []


def test_update_applies_change_and_stores_it():
    cache = CartSessionCache()
    session_id = cache.new_session()
    cache.update(session_id, lambda cart: add_flavor(cart, VANILLA))
    cart = cache.update(session_id, lambda cart: add_flavor(cart, VANILLA))

    assert cart[0].qty == 2
    assert cache.get(session_id)[0].qty == 2


def test_returned_cart_is_a_copy():
    cache = CartSessionCache()
    cache.set("s1", add_flavor([], VANILLA))
    cache.get("s1").clear()
    assert len(cache.get("s1")) == 1


def test_idle_carts_expire():
    clock = FakeTime()
    cache = CartSessionCache(ttl_seconds=60, clock=clock)
    cache.set("old", [])
    clock.now += 30
    cache.set("fresh", [])
    clock.now += 45

    assert cache.cleanup_expired() == 1
    assert "old" not in cache
    assert "fresh" in cache


def test_full_cache_evicts_least_recently_used():
    clock = FakeTime()
    cache = CartSessionCache(max_size=10, clock=clock)
    for i in range(10):
        cache.set(f"s{i}", [])
        clock.now += 1

    cache.set("new", [])
    assert len(cache) == 10
    assert "s0" not in cache
    assert "new" in cache


def test_drop_and_clear():
    cache = CartSessionCache()
    cache.set("a", [])
    cache.set("b", [])
    cache.drop("a")
    assert "a" not in cache
    cache.clear()
    assert len(cache) == 0


def test_take_returns_cart_and_leaves_it_empty():
    cache = CartSessionCache()
    cache.set("s", ["line"])

    assert cache.take("s") == ["line"]
    assert cache.get("s") == []
    # A second take finds nothing left to submit
    assert cache.take("s") == []
    assert cache.take("unknown") == []


def test_restore_puts_cart_back_unless_refilled():
    cache = CartSessionCache()
    cache.set("s", ["a"])
    taken = cache.take("s")
    assert cache.restore("s", taken) == ["a"]

    taken = cache.take("s")
    cache.set("s", ["b"])
    assert cache.restore("s", taken) == ["b"]
