"""
Order Schemas for scan2order
============================

Endpoint Coverage:
------------------
- POST /orders: customer submission (OrderSubmitRequest -> Order)
- GET /staff/orders: staff board (StaffBoardResponse)
- PATCH /staff/orders/{id}: status change (StatusUpdateRequest -> Order)
- POST /staff/orders/sweep: manual expiry sweep (SweepResponse)

Order Lifecycle:
----------------
New -> Paid -> Preparing -> Ready -> Done, with Cancelled reachable from any
non-terminal status. Unpaid orders are cancelled automatically when their
payment window runs out.

Board Filters:
--------------
"Active" (New, Paid, Preparing, Ready), "All", or a single status name.
"""

from typing import Dict, List, Optional

from pydantic import Field

from ..domain import CamelModel, Order, OrderStatus

BOARD_FILTERS = ("Active", "All") + tuple(status.value for status in OrderStatus)


class OrderSubmitRequest(CamelModel):
    """Customer checkout: the cart comes from the session, the rest from the form."""
    session_id: str
    pickup_name: str = ""
    note: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=32)
    marketing_opt_in: bool = False


class StatusUpdateRequest(CamelModel):
    status: OrderStatus


class OrderStatusOut(CamelModel):
    """What the customer feed shows: no names, phones or notes."""
    id: str
    status: OrderStatus

    @classmethod
    def from_order(cls, order: Order) -> "OrderStatusOut":
        return cls(id=order.id, status=order.status)


class StaffBoardResponse(CamelModel):
    filter: str
    counts: Dict[str, int]
    orders: List[Order]


class SweepResponse(CamelModel):
    expired: List[str]
