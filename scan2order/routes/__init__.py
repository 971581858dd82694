"""
Routes Package for scan2order
=============================

This package contains all API route definitions organized by audience. Each
module defines a FastAPI APIRouter with related endpoints grouped together.

**Customer-Facing Routes:**
- catalog.py: Menu with resolved prices
- cart.py: Server-side cart sessions
- orders.py: Order submission and status lookup (rate limited)

**Staff Routes (require the staff PIN):**
- staff_orders.py: Order board, status changes, deletion, expiry sweep

**Live Feed:**
- live.py: WebSocket stream of order snapshots for both views

Route Dependencies:
-------------------
Common dependencies are injected via FastAPI's Depends():
- get_store / get_controller / get_carts / get_catalog (dependencies.py)
- verify_staff_pin: Staff PIN check (auth.py)
- limiter.limit(): Rate limiting

Error Handling:
---------------
Routes raise HTTPException for error conditions:
- 400: Bad request (empty cart, blank pickup name, invalid phone, bad filter)
- 401: Wrong staff PIN
- 404: Unknown order, flavor or drink
- 409: Status change out of Done/Cancelled
- 429: Too many requests (rate limited)
- 503: Staff PIN not configured
"""

from .catalog import catalog_router
from .cart import cart_router
from .orders import orders_router, limiter
from .staff_orders import staff_orders_router
from .live import live_router

__all__ = [
    "catalog_router",
    "cart_router",
    "orders_router",
    "staff_orders_router",
    "live_router",
    "limiter",
]
