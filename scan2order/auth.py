"""
Staff PIN check for the staff board.

The staff board (``/staff/*`` and the staff mode of the live feed) is gated
by a shared PIN sent in the ``X-Staff-PIN`` header, or as the ``pin`` query
parameter on the WebSocket. This keeps customers from wandering into the
board from the same tablet; it is not an authentication system.

Behaviour:
----------
- STAFF_PIN unset: staff endpoints return 503 rather than opening up
- wrong or missing PIN: 401
- PIN comparison is constant-time (``secrets.compare_digest``)

Usage:
------
    from scan2order.auth import verify_staff_pin

    staff_orders_router = APIRouter(
        prefix="/staff/orders",
        dependencies=[Depends(verify_staff_pin)],
    )
"""

import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from . import config


def pin_configured() -> bool:
    return bool(config.STAFF_PIN)


def pin_matches(pin: Optional[str]) -> bool:
    """True when ``pin`` equals the configured STAFF_PIN (False if none is set)."""
    if not config.STAFF_PIN or pin is None:
        return False
    return secrets.compare_digest(
        pin.encode("utf-8"),
        config.STAFF_PIN.encode("utf-8"),
    )


def verify_staff_pin(
    x_staff_pin: Optional[str] = Header(None, alias="X-Staff-PIN"),
) -> None:
    """
    FastAPI dependency guarding the staff endpoints.

    Raises:
        HTTPException (503): STAFF_PIN is not configured.
        HTTPException (401): the header is missing or does not match.
    """
    # Fail closed: no PIN configured means no staff board
    if not pin_configured():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Staff board not configured. Set STAFF_PIN environment variable.",
        )

    if not pin_matches(x_staff_pin):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid staff PIN",
        )
