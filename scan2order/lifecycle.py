"""
Lifecycle Controller: order status rules and payment-window expiry.

Status graph
------------
    New -> Paid -> Preparing -> Ready -> Done
    any non-terminal status -> Cancelled
    Done and Cancelled are terminal

Operator transitions are deliberately permissive: from any non-terminal
status staff may jump straight to Paid, Preparing, Ready, Done or Cancelled
(marking an order Ready without passing through Paid is a normal correction).
Nothing moves an order out of Done or Cancelled.

The only automatic transition is expiry: an order still New after its
``expires_at`` is flipped to Cancelled by ``sweep()``. A manual transition or
an expiry writes the ``status`` field and nothing else.

Deleting an order is not a status; it removes the record whatever its status.
"""

import logging
from typing import Callable, List, Optional, Union

from .domain import Order, OrderStatus
from .store import OrderStore
from .timestamps import now_ms

logger = logging.getLogger(__name__)

# Compare-and-set attempts before a status change gives up
_SET_STATUS_ATTEMPTS = 3

TERMINAL_STATUSES = frozenset({OrderStatus.DONE, OrderStatus.CANCELLED})

OPERATOR_TARGETS = frozenset({
    OrderStatus.PAID,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DONE,
    OrderStatus.CANCELLED,
})

# Statuses shown on the staff board's default "Active" filter
ACTIVE_STATUSES = (
    OrderStatus.NEW,
    OrderStatus.PAID,
    OrderStatus.PREPARING,
    OrderStatus.READY,
)


class InvalidTransitionError(ValueError):
    """Raised when an operator asks for a transition the graph does not allow."""

    def __init__(self, current: OrderStatus, target: OrderStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move an order from {current.value} to {target.value}")


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Whether staff may move an order from ``current`` to ``target``."""
    return current not in TERMINAL_STATUSES and target in OPERATOR_TARGETS


def is_overdue(order: Order, now: int) -> bool:
    """Unpaid and past its payment window."""
    return (
        order.status == OrderStatus.NEW
        and order.expires_at is not None
        and now > order.expires_at
    )


class LifecycleController:
    """Applies status transitions through the order store."""

    def __init__(self, store: OrderStore, clock: Optional[Callable[[], int]] = None):
        self.store = store
        self.clock = clock or store.clock or now_ms

    def set_status(self, order_id: str, target: Union[OrderStatus, str]) -> Optional[Order]:
        """
        Move an order to ``target``.

        Every write is a compare-and-set on the status that was just checked,
        so a concurrent sweep or staff change is never overwritten: on a lost
        race the order is re-read and the rules applied again.

        Returns:
            The order as persisted, or None when no order has this id.

        Raises:
            InvalidTransitionError: the order is Done/Cancelled, or ``target``
                                    is not an operator status (e.g. New).
        """
        target = OrderStatus(target)
        order = None
        for _ in range(_SET_STATUS_ATTEMPTS):
            order = self.store.get(order_id)
            if order is None:
                logger.debug("Status change for unknown order %s ignored", order_id)
                return None

            if not can_transition(order.status, target):
                raise InvalidTransitionError(order.status, target)

            if self.store.update(order_id, {"status": target}, expected_status=order.status):
                logger.info("Order %s: %s -> %s", order_id, order.status.value, target.value)
                return order.model_copy(update={"status": target})

            logger.debug("Order %s changed while updating; retrying", order_id)

        # Still losing the race: report the status we last saw
        raise InvalidTransitionError(order.status, target)

    def delete(self, order_id: str) -> bool:
        return self.store.delete(order_id)

    def sweep(self, now: Optional[int] = None) -> List[str]:
        """
        Cancel every New order whose payment window has passed.

        Persists at most one batch write and returns the ids whose records
        were actually cancelled. Orders paid between the read and the write
        are left alone and not reported. Running it again finds nothing new
        to do.
        """
        if now is None:
            now = self.clock()

        overdue = [order.id for order in self.store.list_all() if is_overdue(order, now)]
        if not overdue:
            return []

        patches = {order_id: {"status": OrderStatus.CANCELLED} for order_id in overdue}
        expired = self.store.update_many(
            patches,
            expected_status=OrderStatus.NEW,
            expires_before=now,
        )
        if expired:
            logger.info("Expired %d unpaid order(s): %s", len(expired), ", ".join(expired))
        return expired
