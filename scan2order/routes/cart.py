"""
Cart Routes
===========

The customer's cart lives server side under a session id handed out by
``POST /cart``. Every mutation returns the whole cart so the page can simply
re-render it.

Endpoints:
----------
- POST   /cart                                   start a cart
- GET    /cart/{session_id}                      read it
- DELETE /cart/{session_id}                      empty it
- POST   /cart/{session_id}/flavors/{flavor_id}  add one product in a flavor
- POST   /cart/{session_id}/drinks/{drink_id}    add one drink
- POST   /cart/{session_id}/items/{sku}/addon    add one add-on to a line
- DELETE /cart/{session_id}/items/{sku}/addon    remove one add-on
- POST   /cart/{session_id}/items/{sku}/increment
- POST   /cart/{session_id}/items/{sku}/decrement

Unknown flavor or drink ids are a 404. Per-line operations on a sku that is
not in the cart leave the cart unchanged.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from .. import cart as cart_ops
from ..catalog import Catalog, CatalogLookupError
from ..dependencies import get_carts, get_catalog
from ..schemas.cart import CartOut
from ..services.cart_sessions import CartSessionCache

cart_router = APIRouter(prefix="/cart", tags=["Cart"])


def _not_on_menu(e: CatalogLookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@cart_router.post("", response_model=CartOut, status_code=status.HTTP_201_CREATED)
def start_cart(carts: CartSessionCache = Depends(get_carts)) -> CartOut:
    session_id = carts.new_session()
    return CartOut.from_cart(session_id, [])


@cart_router.get("/{session_id}", response_model=CartOut)
def read_cart(session_id: str, carts: CartSessionCache = Depends(get_carts)) -> CartOut:
    return CartOut.from_cart(session_id, carts.get(session_id))


@cart_router.delete("/{session_id}", response_model=CartOut)
def clear_cart(session_id: str, carts: CartSessionCache = Depends(get_carts)) -> CartOut:
    return CartOut.from_cart(session_id, carts.update(session_id, cart_ops.clear))


@cart_router.post("/{session_id}/flavors/{flavor_id}", response_model=CartOut)
def add_flavor(
    session_id: str,
    flavor_id: str,
    carts: CartSessionCache = Depends(get_carts),
    catalog: Catalog = Depends(get_catalog),
) -> CartOut:
    try:
        flavor = catalog.get_flavor(flavor_id)
    except CatalogLookupError as e:
        raise _not_on_menu(e)

    cart = carts.update(session_id, lambda c: cart_ops.add_flavor(c, flavor, catalog))
    return CartOut.from_cart(session_id, cart)


@cart_router.post("/{session_id}/drinks/{drink_id}", response_model=CartOut)
def add_drink(
    session_id: str,
    drink_id: str,
    carts: CartSessionCache = Depends(get_carts),
    catalog: Catalog = Depends(get_catalog),
) -> CartOut:
    try:
        catalog.get_drink(drink_id)
    except CatalogLookupError as e:
        raise _not_on_menu(e)

    cart = carts.update(session_id, lambda c: cart_ops.add_drink(c, drink_id, catalog))
    return CartOut.from_cart(session_id, cart)


@cart_router.post("/{session_id}/items/{sku}/addon", response_model=CartOut)
def add_addon(
    session_id: str,
    sku: str,
    carts: CartSessionCache = Depends(get_carts),
    catalog: Catalog = Depends(get_catalog),
) -> CartOut:
    cart = carts.update(session_id, lambda c: cart_ops.add_addon_to_item(c, sku, catalog))
    return CartOut.from_cart(session_id, cart)


@cart_router.delete("/{session_id}/items/{sku}/addon", response_model=CartOut)
def remove_addon(
    session_id: str,
    sku: str,
    carts: CartSessionCache = Depends(get_carts),
    catalog: Catalog = Depends(get_catalog),
) -> CartOut:
    cart = carts.update(session_id, lambda c: cart_ops.remove_addon_from_item(c, sku, catalog))
    return CartOut.from_cart(session_id, cart)


@cart_router.post("/{session_id}/items/{sku}/increment", response_model=CartOut)
def increment_item(session_id: str, sku: str, carts: CartSessionCache = Depends(get_carts)) -> CartOut:
    cart = carts.update(session_id, lambda c: cart_ops.increment(c, sku))
    return CartOut.from_cart(session_id, cart)


@cart_router.post("/{session_id}/items/{sku}/decrement", response_model=CartOut)
def decrement_item(session_id: str, sku: str, carts: CartSessionCache = Depends(get_carts)) -> CartOut:
    cart = carts.update(session_id, lambda c: cart_ops.decrement(c, sku))
    return CartOut.from_cart(session_id, cart)
