"""
Tests for the cart engine (pure functions over a list of line items).
"""
import pytest

from scan2order.cart import (
    add_addon_to_item,
    add_drink,
    add_flavor,
    decrement,
    find_line,
    increment,
    item_count,
    line_total,
    remove_addon_from_item,
    subtotal,
)
from scan2order.catalog import CATALOG, CatalogLookupError
from scan2order.domain import AddonLine, CartLineItem

VANILLA = CATALOG.get_flavor("van")
CHOCOLATE = CATALOG.get_flavor("cho")


class TestAddingItems:
    def test_repeated_flavor_bumps_one_line(self):
        cart = []
        for _ in range(3):
            cart = add_flavor(cart, CHOCOLATE)

        assert len(cart) == 1
        assert cart[0].sku == "souffle-cho"
        assert cart[0].qty == 3
        assert cart[0].name == "Soufflé - Chocolate"
        assert cart[0].unit_price == 13.5

    def test_different_flavors_get_separate_lines(self):
        cart = add_flavor(add_flavor([], VANILLA), CHOCOLATE)
        assert [line.sku for line in cart] == ["souffle-van", "souffle-cho"]

    def test_repeated_drink_bumps_one_line(self):
        cart = add_drink(add_drink([], "latte"), "latte")
        assert len(cart) == 1
        assert cart[0].kind == "drink"
        assert cart[0].qty == 2

    def test_unknown_drink_raises(self):
        with pytest.raises(CatalogLookupError):
            add_drink([], "cola")

    def test_input_cart_is_not_modified(self):
        original = add_flavor([], VANILLA)
        add_flavor(original, VANILLA)
        assert original[0].qty == 1


class TestQuantities:
    def test_increment_and_decrement(self):
        cart = add_flavor([], VANILLA)
        cart = increment(cart, "souffle-van")
        assert cart[0].qty == 2
        cart = decrement(cart, "souffle-van")
        assert cart[0].qty == 1

    def test_decrement_at_one_removes_line(self):
        cart = add_flavor(add_flavor([], VANILLA), CHOCOLATE)
        cart = decrement(cart, "souffle-van")
        assert find_line(cart, "souffle-van") is None
        assert len(cart) == 1

    def test_unknown_sku_leaves_cart_unchanged(self):
        cart = add_flavor([], VANILLA)
        assert increment(cart, "nope") == cart
        assert decrement(cart, "nope") == cart
        assert add_addon_to_item(cart, "nope") == cart


class TestAddons:
    def test_product_addon_is_uncapped(self):
        cart = add_flavor([], VANILLA)
        for _ in range(3):
            cart = add_addon_to_item(cart, "souffle-van")
        assert cart[0].addons[0].qty == 3
        assert cart[0].addons[0].unit_price == 2.0

    def test_drink_addon_capped_at_line_qty(self):
        cart = add_drink([], "latte")
        cart = add_addon_to_item(cart, "drink-latte")
        cart = add_addon_to_item(cart, "drink-latte")
        assert cart[0].addons[0].qty == 1

        cart = increment(cart, "drink-latte")
        cart = add_addon_to_item(cart, "drink-latte")
        assert cart[0].addons[0].qty == 2

    def test_drink_decrement_clamps_addon(self):
        cart = add_drink(add_drink([], "latte"), "latte")
        cart = add_addon_to_item(add_addon_to_item(cart, "drink-latte"), "drink-latte")
        cart = decrement(cart, "drink-latte")
        assert cart[0].qty == 1
        assert cart[0].addons[0].qty == 1

    def test_drink_addon_never_exceeds_qty_for_any_sequence(self):
        ops = ["addon", "inc", "addon", "addon", "dec", "addon", "inc", "addon", "dec", "dec"]
        cart = add_drink([], "lemon-tea")
        for op in ops:
            if op == "addon":
                cart = add_addon_to_item(cart, "drink-lemon-tea")
            elif op == "inc":
                cart = increment(cart, "drink-lemon-tea")
            else:
                cart = decrement(cart, "drink-lemon-tea")
            for line in cart:
                for addon in line.addons:
                    assert addon.qty <= line.qty

    def test_remove_addon_drops_it_at_zero(self):
        cart = add_addon_to_item(add_flavor([], VANILLA), "souffle-van")
        cart = remove_addon_from_item(cart, "souffle-van")
        assert cart[0].addons == []
        # Removing again is a no-op
        assert remove_addon_from_item(cart, "souffle-van")[0].addons == []


class TestTotals:
    def test_subtotal_includes_addons(self):
        cart = [
            CartLineItem(sku="souffle-van", name="Soufflé - Vanilla", unit_price=12.0, qty=2),
            CartLineItem(
                sku="drink-lemon-tea",
                kind="drink",
                name="Iced Lemon Tea",
                unit_price=3.0,
                qty=1,
                addons=[AddonLine(id="cream", name="Whipped Cream", unit_price=2.0, qty=1)],
            ),
        ]
        assert subtotal(cart) == 29.0
        assert line_total(cart[1]) == 5.0
        assert item_count(cart) == 3

    def test_empty_cart(self):
        assert subtotal([]) == 0
        assert item_count([]) == 0
