"""
Order Submission Service
========================

Converts the customer's cart into an Order and hands it to the store.

Validation happens before anything is written. A submission is rejected
(``OrderValidationError``) when:

- the cart is empty
- the pickup name is blank or only whitespace
- a phone number was given but cannot be read

Totals:
-------
The order total is the cart subtotal rounded to 2 decimals, once, here. It is
stored with the order and never recomputed, even if catalog prices change.

Expiry:
-------
A new order is "New" and expires ``PAYMENT_WINDOW_SECONDS`` after its
creation time unless staff mark it paid (see lifecycle.py).
"""

import logging
from typing import List, Optional, Tuple

import phonenumbers
from phonenumbers.phonenumberutil import NumberParseException

from .. import config
from ..cart import Cart, subtotal
from ..domain import Order, OrderDraft, OrderItem, OrderStatus
from ..store import OrderStore

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "Your cart is empty. Tap a flavor to add it."
BLANK_NAME_MESSAGE = "Please enter a pickup name."


class OrderValidationError(ValueError):
    """Submission rejected before any state change; ``message`` is user-facing."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


def validate_phone_number(phone: str, region: Optional[str] = None) -> Tuple[Optional[str], Optional[str]]:
    """
    Validate a phone number using Google's phonenumbers library.

    Args:
        phone: Raw phone number string (can have various formats)
        region: Region assumed when the number has no country code

    Returns:
        Tuple of (validated_phone, error_message).
        - If valid: (E.164 phone, None)
        - If invalid: (None, user-friendly error message)
    """
    if region is None:
        region = config.PHONE_DEFAULT_REGION

    try:
        parsed = phonenumbers.parse(phone, region)
    except NumberParseException as e:
        logger.debug("Phone parse failed: %s", e)
        return (None, "That doesn't look like a phone number. Please check it and try again.")

    if not phonenumbers.is_valid_number(parsed):
        return (None, "That phone number doesn't seem to be valid. Please check it and try again.")

    return (phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164), None)


def freeze_items(cart: Cart) -> List[OrderItem]:
    """Copy cart lines into order items (the historical record)."""
    return [
        OrderItem(
            sku=line.sku,
            name=line.name,
            unit_price=line.unit_price,
            qty=line.qty,
            addons=[addon.model_copy() for addon in line.addons],
        )
        for line in cart
    ]


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_draft(
    cart: Cart,
    pickup_name: Optional[str],
    now: int,
    note: Optional[str] = None,
    phone: Optional[str] = None,
    marketing_opt_in: bool = False,
    payment_window_seconds: Optional[int] = None,
) -> OrderDraft:
    """
    Validate the submission and build the draft the store will persist.

    Raises:
        OrderValidationError: empty cart, blank pickup name or invalid phone.
    """
    if not cart:
        raise OrderValidationError("empty_cart", EMPTY_CART_MESSAGE)

    name = (pickup_name or "").strip()
    if not name:
        raise OrderValidationError("blank_pickup_name", BLANK_NAME_MESSAGE)

    normalized_phone = None
    raw_phone = _blank_to_none(phone)
    if raw_phone is not None:
        normalized_phone, error = validate_phone_number(raw_phone)
        if error:
            raise OrderValidationError("invalid_phone", error)

    if payment_window_seconds is None:
        payment_window_seconds = config.PAYMENT_WINDOW_SECONDS

    return OrderDraft(
        items=freeze_items(cart),
        total=round(subtotal(cart), 2),
        status=OrderStatus.NEW,
        expires_at=now + payment_window_seconds * 1000,
        note=_blank_to_none(note),
        pickup_name=name,
        phone=normalized_phone,
        marketing_opt_in=bool(marketing_opt_in),
    )


def submit_order(
    store: OrderStore,
    cart: Cart,
    pickup_name: Optional[str],
    note: Optional[str] = None,
    phone: Optional[str] = None,
    marketing_opt_in: bool = False,
    now: Optional[int] = None,
    payment_window_seconds: Optional[int] = None,
) -> Order:
    """
    Validate and persist an order built from ``cart``.

    The caller is responsible for clearing its cart once this returns.

    Raises:
        OrderValidationError: nothing was written.
    """
    if now is None:
        now = store.clock()

    draft = build_draft(
        cart,
        pickup_name,
        now,
        note=note,
        phone=phone,
        marketing_opt_in=marketing_opt_in,
        payment_window_seconds=payment_window_seconds,
    )
    order_id = store.create(draft, created_at=now)
    return Order(id=order_id, created_at=now, **draft.model_dump())
