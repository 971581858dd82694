"""Cart session payloads."""

from typing import List

from ..cart import Cart, item_count, subtotal
from ..domain import CamelModel, CartLineItem


class CartOut(CamelModel):
    session_id: str
    items: List[CartLineItem]
    subtotal: float
    item_count: int

    @classmethod
    def from_cart(cls, session_id: str, cart: Cart) -> "CartOut":
        return cls(
            session_id=session_id,
            items=cart,
            subtotal=subtotal(cart),
            item_count=item_count(cart),
        )
