"""
Configuration Module for scan2order
===================================

This module centralizes the configuration settings, environment variables and
constants used throughout the service. Values are parsed once at import time
so a bad value fails at startup rather than in the middle of a rush.

Configuration Categories:
-------------------------
- **Order Lifecycle**: Payment window, expiry sweep cadence and how many orders
  the store keeps.

- **Queue Numbers**: Prefix used for the human-facing queue number.

- **Persistence**: Which backend holds the order collection (a SQL database or
  a local JSON document) and where it lives.

- **Customer Flow**: Cart cache sizing, the optional submission delay and the
  default region used to read phone numbers.

- **Rate Limiting / CORS**: Protection for the public order endpoint and
  frontend integration.

- **Staff Board**: The shared PIN that gates the staff view. This is a UI
  convenience, not an access control layer.

Environment Variables:
----------------------
- PAYMENT_WINDOW_SECONDS: Unpaid orders auto-cancel after this (default: 600)
- SWEEP_INTERVAL_SECONDS: Expiry sweep interval (default: 30)
- CHANGE_POLL_INTERVAL_SECONDS: Interval for picking up other writers (default: 2)
- ORDER_HISTORY_LIMIT: Orders kept in the store (default: 300)
- QUEUE_PREFIX: Queue number prefix (default: "Q-")
- STORE_BACKEND: "sql" or "json" (default: "sql")
- DATABASE_URL: SQLAlchemy URL for the sql backend
- ORDERS_JSON_PATH: File used by the json backend
- SUBMIT_DELAY_MS: Artificial delay before a submission completes (default: 0)
- PHONE_DEFAULT_REGION: Region for phone numbers without a country code (default: "MY")
- CART_TTL_SECONDS / CART_MAX_CACHE_SIZE: Cart cache sizing
- RATE_LIMIT_ORDERS / RATE_LIMIT_ENABLED: Order submission throttling
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")
- STAFF_PIN: PIN for the staff board (staff routes answer 503 when unset)

Usage:
------
    from scan2order.config import PAYMENT_WINDOW_SECONDS, ORDER_HISTORY_LIMIT
"""

import os
from typing import List


# =============================================================================
# Order Lifecycle Configuration
# =============================================================================
# An order starts as "New" and must be paid at the counter within the payment
# window, otherwise the sweep cancels it.

PAYMENT_WINDOW_SECONDS: int = int(os.getenv("PAYMENT_WINDOW_SECONDS", "600"))  # 10 minutes

# How often the background sweep looks for overdue unpaid orders
SWEEP_INTERVAL_SECONDS: float = float(os.getenv("SWEEP_INTERVAL_SECONDS", "30"))

# How often the store re-reads the backend to notice writes made by another
# process (a second counter tablet pointed at the same database or file)
CHANGE_POLL_INTERVAL_SECONDS: float = float(os.getenv("CHANGE_POLL_INTERVAL_SECONDS", "2"))

# Most recent orders kept; older ones are dropped first
ORDER_HISTORY_LIMIT: int = int(os.getenv("ORDER_HISTORY_LIMIT", "300"))


# =============================================================================
# Queue Number Configuration
# =============================================================================
# Queue numbers look like "Q-001" and restart every calendar year.

QUEUE_PREFIX: str = os.getenv("QUEUE_PREFIX", "Q-")


# =============================================================================
# Persistence Configuration
# =============================================================================
# "sql"  - SQLAlchemy tables, per-row atomic updates (default)
# "json" - a single local JSON document, whole-collection rewrites

STORE_BACKEND: str = os.getenv("STORE_BACKEND", "sql").strip().lower()
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./data/scan2order.db")
ORDERS_JSON_PATH: str = os.getenv("ORDERS_JSON_PATH", "./data/orders.json")


# =============================================================================
# Customer Flow Configuration
# =============================================================================

# Optional pause before a submission completes so the UI can show a busy state
SUBMIT_DELAY_MS: int = int(os.getenv("SUBMIT_DELAY_MS", "0"))

# Region assumed for phone numbers typed without a country code
PHONE_DEFAULT_REGION: str = os.getenv("PHONE_DEFAULT_REGION", "MY")

# Carts are held in memory only; an idle cart is forgotten after the TTL
CART_TTL_SECONDS: int = int(os.getenv("CART_TTL_SECONDS", "3600"))  # 1 hour
CART_MAX_CACHE_SIZE: int = int(os.getenv("CART_MAX_CACHE_SIZE", "1000"))


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Rate limit format: "X per Y" where Y is second, minute, hour, or day

RATE_LIMIT_ORDERS: str = os.getenv("RATE_LIMIT_ORDERS", "30 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_orders() -> str:
    """
    Return the current order submission rate limit.

    Read through a function so tests can override the module constant.
    """
    return RATE_LIMIT_ORDERS


# =============================================================================
# CORS Configuration
# =============================================================================
# Default "*" allows all origins (suitable for development only)

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]


# =============================================================================
# Staff Board Configuration
# =============================================================================
# Shared PIN typed on the counter tablet. Staff endpoints fail closed (503)
# when it is not configured.

STAFF_PIN: str = os.getenv("STAFF_PIN", "")
