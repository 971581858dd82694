"""
API request/response schemas (pydantic v2, camelCase on the wire).

- catalog: menu payload for the customer view
- cart: cart session payloads
- orders: submission, status updates and the staff board
"""

from .catalog import CatalogOut, catalog_to_out
from .cart import CartOut
from .orders import (
    OrderSubmitRequest,
    StatusUpdateRequest,
    OrderStatusOut,
    StaffBoardResponse,
    SweepResponse,
    BOARD_FILTERS,
)

__all__ = [
    "CatalogOut",
    "catalog_to_out",
    "CartOut",
    "OrderSubmitRequest",
    "StatusUpdateRequest",
    "OrderStatusOut",
    "StaffBoardResponse",
    "SweepResponse",
    "BOARD_FILTERS",
]
