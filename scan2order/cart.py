"""
Cart Engine.

Every operation takes a cart (a list of CartLineItem) and returns a new list;
the input list and its items are never modified, so a cart held in a cache can
be swapped atomically.

Rules:
- one line per sku; adding the same flavor or drink again bumps ``qty``
- a line whose qty would drop to 0 is removed instead
- the add-on on a drink line never exceeds the drink's qty (one add-on per
  cup); product lines have no such cap
- unknown skus are ignored by every per-line operation
"""

from typing import Callable, List, Optional

from .catalog import CATALOG, Catalog, Flavor
from .domain import AddonLine, CartLineItem


Cart = List[CartLineItem]


def make_sku(product_id: str, flavor_id: str) -> str:
    """Line key for a product in a given flavor."""
    return f"{product_id}-{flavor_id}"


def find_line(cart: Cart, sku: str) -> Optional[CartLineItem]:
    for line in cart:
        if line.sku == sku:
            return line
    return None


def _replace_line(
    cart: Cart,
    sku: str,
    change: Callable[[CartLineItem], Optional[CartLineItem]],
) -> Cart:
    """Apply ``change`` to the line with ``sku``; a None result drops the line."""
    result: Cart = []
    for line in cart:
        if line.sku != sku:
            result.append(line)
            continue
        updated = change(line)
        if updated is not None:
            result.append(updated)
    return result


def _bump_or_append(cart: Cart, new_line: CartLineItem) -> Cart:
    if find_line(cart, new_line.sku) is None:
        return list(cart) + [new_line]
    return _replace_line(
        cart,
        new_line.sku,
        lambda line: line.model_copy(update={"qty": line.qty + 1}),
    )


def add_flavor(cart: Cart, flavor: Flavor, catalog: Catalog = CATALOG) -> Cart:
    """Add one unit of the product in ``flavor``."""
    product = catalog.product
    new_line = CartLineItem(
        sku=make_sku(product.id, flavor.id),
        kind="product",
        flavor_id=flavor.id,
        name=f"{product.name} - {flavor.name}",
        unit_price=catalog.price_for(flavor),
        qty=1,
    )
    return _bump_or_append(cart, new_line)


def add_drink(cart: Cart, drink_id: str, catalog: Catalog = CATALOG) -> Cart:
    """
    Add one unit of a drink.

    Raises:
        CatalogLookupError: if ``drink_id`` is not on the menu.
    """
    drink = catalog.get_drink(drink_id)
    new_line = CartLineItem(
        sku=drink.sku,
        kind="drink",
        name=drink.name,
        unit_price=drink.price,
        qty=1,
    )
    return _bump_or_append(cart, new_line)


def _addon_cap(line: CartLineItem) -> Optional[int]:
    return line.qty if line.kind == "drink" else None


def add_addon_to_item(cart: Cart, sku: str, catalog: Catalog = CATALOG) -> Cart:
    """
    Add one unit of the catalog add-on to the line with ``sku``.

    No-op when the line does not exist, the catalog has no add-on, or a drink
    line already carries one add-on per cup.
    """
    option = catalog.addon
    if option is None or find_line(cart, sku) is None:
        return list(cart)

    def change(line: CartLineItem) -> CartLineItem:
        cap = _addon_cap(line)
        addons = []
        found = False
        for addon in line.addons:
            if addon.id == option.id:
                found = True
                if cap is None or addon.qty < cap:
                    addon = addon.model_copy(update={"qty": addon.qty + 1})
            addons.append(addon)
        if not found:
            addons.append(AddonLine(id=option.id, name=option.name, unit_price=option.price, qty=1))
        return line.model_copy(update={"addons": addons})

    return _replace_line(cart, sku, change)


def remove_addon_from_item(cart: Cart, sku: str, catalog: Catalog = CATALOG) -> Cart:
    """Take one unit of the catalog add-on off the line; drops it at zero."""
    option = catalog.addon
    if option is None or find_line(cart, sku) is None:
        return list(cart)

    def change(line: CartLineItem) -> CartLineItem:
        addons = []
        for addon in line.addons:
            if addon.id == option.id:
                if addon.qty <= 1:
                    continue
                addon = addon.model_copy(update={"qty": addon.qty - 1})
            addons.append(addon)
        return line.model_copy(update={"addons": addons})

    return _replace_line(cart, sku, change)


def increment(cart: Cart, sku: str) -> Cart:
    return _replace_line(cart, sku, lambda line: line.model_copy(update={"qty": line.qty + 1}))


def decrement(cart: Cart, sku: str) -> Cart:
    """Remove one unit; the line disappears when its last unit goes."""

    def change(line: CartLineItem) -> Optional[CartLineItem]:
        if line.qty <= 1:
            return None
        qty = line.qty - 1
        addons = line.addons
        if line.kind == "drink":
            addons = [
                addon.model_copy(update={"qty": min(addon.qty, qty)})
                for addon in addons
            ]
        return line.model_copy(update={"qty": qty, "addons": addons})

    return _replace_line(cart, sku, change)


def clear(cart: Cart) -> Cart:
    return []


def line_total(line) -> float:
    """``unit_price * qty`` plus every add-on's ``unit_price * qty``.

    Works for cart lines and frozen order items alike.
    """
    total = line.unit_price * line.qty
    for addon in line.addons:
        total += addon.unit_price * addon.qty
    return total


def subtotal(cart: Cart) -> float:
    total = 0.0
    for line in cart:
        total += line_total(line)
    return total


def item_count(cart: Cart) -> int:
    return sum(line.qty for line in cart)
