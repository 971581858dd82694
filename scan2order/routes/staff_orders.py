"""
Staff Order Routes
==================

The counter's order board. Every endpoint requires the staff PIN
(``X-Staff-PIN`` header, see auth.py).

Endpoints:
----------
- GET    /staff/orders?filter=Active: board listing, newest first
- PATCH  /staff/orders/{order_id}: change status
- DELETE /staff/orders/{order_id}: remove one order
- DELETE /staff/orders: remove every order and restart queue numbers
- POST   /staff/orders/sweep: cancel overdue unpaid orders now

Filters:
--------
- Active (default): New, Paid, Preparing, Ready
- All: everything the store holds
- any single status name, e.g. ?filter=Ready

Status Changes:
---------------
Staff may move any order that is not Done/Cancelled to Paid, Preparing,
Ready, Done or Cancelled. Asking to move a Done or Cancelled order (or to set
an order back to New) is a 409. An unknown queue number is a 404.
"""

import logging
from collections import Counter
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..auth import verify_staff_pin
from ..dependencies import get_controller, get_store
from ..domain import Order
from ..lifecycle import ACTIVE_STATUSES, InvalidTransitionError, LifecycleController
from ..schemas.orders import (
    BOARD_FILTERS,
    StaffBoardResponse,
    StatusUpdateRequest,
    SweepResponse,
)
from ..store import OrderStore

logger = logging.getLogger(__name__)

staff_orders_router = APIRouter(
    prefix="/staff/orders",
    tags=["Staff - Orders"],
    dependencies=[Depends(verify_staff_pin)],
)


def filter_orders(orders: List[Order], board_filter: str) -> List[Order]:
    if board_filter == "All":
        return list(orders)
    if board_filter == "Active":
        return [o for o in orders if o.status in ACTIVE_STATUSES]
    return [o for o in orders if o.status.value == board_filter]


# =============================================================================
# Board Endpoints
# =============================================================================

@staff_orders_router.get("", response_model=StaffBoardResponse)
def list_orders(
    store: OrderStore = Depends(get_store),
    board_filter: str = Query("Active", alias="filter"),
) -> StaffBoardResponse:
    """Orders for the board, newest first, with per-status counts."""
    if board_filter not in BOARD_FILTERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown filter. Use one of: {', '.join(BOARD_FILTERS)}",
        )

    orders = store.snapshot()
    counts = Counter(o.status.value for o in orders)
    return StaffBoardResponse(
        filter=board_filter,
        counts=dict(counts),
        orders=filter_orders(orders, board_filter),
    )


@staff_orders_router.patch("/{order_id}", response_model=Order)
def update_order_status(
    order_id: str,
    body: StatusUpdateRequest,
    controller: LifecycleController = Depends(get_controller),
) -> Order:
    try:
        order = controller.set_status(order_id, body.status)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@staff_orders_router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: str,
    controller: LifecycleController = Depends(get_controller),
) -> Response:
    controller.delete(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@staff_orders_router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def wipe_orders(store: OrderStore = Depends(get_store)) -> Response:
    store.wipe_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@staff_orders_router.post("/sweep", response_model=SweepResponse)
def run_sweep(controller: LifecycleController = Depends(get_controller)) -> SweepResponse:
    return SweepResponse(expired=controller.sweep())
