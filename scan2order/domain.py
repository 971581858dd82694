"""
Pydantic models for carts and orders.

Python code uses snake_case attributes; the serialized form (API payloads and
the JSON document store) uses camelCase keys such as ``createdAt`` and
``pickupName``.

- AddonLine: an add-on attached to a line item
- CartLineItem: one line of an in-progress cart
- OrderItem: a line item frozen at submission time
- OrderDraft: what the ordering service hands to the store
- Order: a persisted order with its queue number and timestamps
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrderStatus(str, Enum):
    """Fulfillment status of an order."""
    NEW = "New"
    PAID = "Paid"
    PREPARING = "Preparing"
    READY = "Ready"
    DONE = "Done"
    CANCELLED = "Cancelled"


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either spelling."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_doc(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AddonLine(CamelModel):
    id: str
    name: str
    unit_price: float
    qty: int = Field(1, ge=1)


class CartLineItem(CamelModel):
    sku: str
    kind: Literal["product", "drink"] = "product"
    flavor_id: Optional[str] = None
    name: str
    unit_price: float
    qty: int = Field(1, ge=1)
    addons: List[AddonLine] = Field(default_factory=list)


class OrderItem(CamelModel):
    sku: str
    name: str
    unit_price: float
    qty: int = Field(..., ge=1)
    addons: List[AddonLine] = Field(default_factory=list)


class OrderDraft(CamelModel):
    """Order fields known before the store assigns an id and creation time."""
    items: List[OrderItem]
    total: float
    status: OrderStatus = OrderStatus.NEW
    expires_at: Optional[int] = None
    note: Optional[str] = None
    pickup_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    marketing_opt_in: bool = False


class Order(OrderDraft):
    id: str
    created_at: int

    def is_active(self) -> bool:
        return self.status not in (OrderStatus.DONE, OrderStatus.CANCELLED)


# Fields a store update may touch; everything else is fixed at creation.
UPDATABLE_FIELDS = frozenset({
    "status",
    "note",
    "pickup_name",
    "phone",
    "marketing_opt_in",
    "expires_at",
})
