"""
Customer Order Routes
=====================

Endpoints:
----------
- POST /orders: turn the session's cart into an order (rate limited)
- GET /orders/{order_id}: confirmation / status lookup by queue number

Submission:
-----------
The cart is taken out of the cart cache by ``sessionId`` in one step, so a
double tap cannot submit the same items twice. Validation failures (empty
cart, blank pickup name, unreadable phone) answer 400 with the message to
show the customer; nothing is written and the cart is put back. On success
the new order is returned with status 201.

SUBMIT_DELAY_MS adds a short pause before the order is written, giving the
page time to show its busy state. It is 0 unless configured.

Rate Limiting:
--------------
Submissions are throttled per client address (RATE_LIMIT_ORDERS, e.g.
"30 per minute"); excess requests get 429.
"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from .. import config
from ..config import RATE_LIMIT_ENABLED, get_rate_limit_orders
from ..dependencies import get_carts, get_store
from ..domain import Order
from ..schemas.orders import OrderSubmitRequest
from ..services.cart_sessions import CartSessionCache
from ..services.ordering import OrderValidationError, submit_order
from ..store import OrderStore

logger = logging.getLogger(__name__)

orders_router = APIRouter(prefix="/orders", tags=["Orders"])


# =============================================================================
# Rate Limiting Setup
# =============================================================================
# In-memory storage; fine for a single process on the counter tablet.

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


# =============================================================================
# Order Endpoints
# =============================================================================

@orders_router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit_orders)
def place_order(
    request: Request,
    body: OrderSubmitRequest,
    store: OrderStore = Depends(get_store),
    carts: CartSessionCache = Depends(get_carts),
) -> Order:
    """
    Submit the cart held under ``sessionId``.

    Returns the persisted order, including its queue number (``id``) and
    payment deadline (``expiresAt``).
    """
    if config.SUBMIT_DELAY_MS > 0:
        time.sleep(config.SUBMIT_DELAY_MS / 1000)

    cart = carts.take(body.session_id)
    try:
        return submit_order(
            store,
            cart,
            body.pickup_name,
            note=body.note,
            phone=body.phone,
            marketing_opt_in=body.marketing_opt_in,
        )
    except OrderValidationError as e:
        logger.info("Order rejected (%s) for session %s", e.code, body.session_id[:8])
        if cart:
            carts.restore(body.session_id, cart)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception:
        if cart:
            carts.restore(body.session_id, cart)
        raise


@orders_router.get("/{order_id}", response_model=Order)
def get_order(order_id: str, store: OrderStore = Depends(get_store)) -> Order:
    order = store.get(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
