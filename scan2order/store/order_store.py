"""
Order Store: the single writer of order records.

The store sits in front of a backend (see backends.py) and adds:

- queue numbers and creation timestamps on ``create``
- truncation to the most recent ``history_limit`` orders
- change notification: ``subscribe(callback)`` registers interest in the
  full collection. The callback receives the current snapshot right away and
  again after every persisted change. Local writes notify synchronously;
  writes made by another process sharing the backend are picked up by
  ``poll_changes()``, which the application runs on a timer.

Snapshots are lists of Order, newest first by ``created_at``, capped at
``history_limit``. The store itself does not promise any ordering for
``list_all()``.

One store instance is created per process (see app_factory.create_app) and
passed to whatever needs it.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from .. import config
from ..domain import Order, OrderDraft, OrderStatus
from ..timestamps import local_year, now_ms
from .backends import OrderBackend, clean_patch
from .sequence import format_queue_number

logger = logging.getLogger(__name__)

Subscriber = Callable[[List[Order]], None]


class OrderStore:
    def __init__(
        self,
        backend: OrderBackend,
        clock: Callable[[], int] = now_ms,
        history_limit: Optional[int] = None,
        queue_prefix: Optional[str] = None,
    ):
        self.backend = backend
        self.clock = clock
        self.history_limit = history_limit or config.ORDER_HISTORY_LIMIT
        self.queue_prefix = queue_prefix if queue_prefix is not None else config.QUEUE_PREFIX

        # Serializes read-modify-write sequences and notification order
        self._lock = threading.RLock()
        self._subscribers: Dict[int, Subscriber] = {}
        self._next_token = 0
        self._last_published: Optional[List[dict]] = None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, draft: OrderDraft, created_at: Optional[int] = None) -> str:
        """
        Persist a new order and return its queue number.

        Args:
            draft: Order fields decided by the caller (items, total, expiry...)
            created_at: Submission time in epoch ms; defaults to the store clock

        Returns:
            The assigned queue number, e.g. "Q-014"
        """
        with self._lock:
            created = created_at if created_at is not None else self.clock()
            n = self.backend.next_sequence(local_year(created))
            order_id = format_queue_number(n, self.queue_prefix)
            order = Order(id=order_id, created_at=created, **draft.model_dump())
            self.backend.insert(order, self.history_limit)
            logger.info("Order %s created with %d line(s)", order_id, len(order.items))
            self._publish()
        return order_id

    def update(
        self,
        order_id: str,
        patch: Dict[str, Any],
        expected_status: Optional[OrderStatus] = None,
    ) -> bool:
        """
        Merge ``patch`` into the order. Unknown ids are ignored (returns False).

        Raises:
            ValueError: if the patch names a field that cannot change.
        """
        cleaned = clean_patch(patch)
        with self._lock:
            changed = self.backend.update(order_id, cleaned, expected_status=expected_status)
            if changed:
                logger.debug("Order %s updated: %s", order_id, sorted(cleaned))
                self._publish()
            return changed

    def update_many(
        self,
        patches: Dict[str, Dict[str, Any]],
        expected_status: Optional[OrderStatus] = None,
        expires_before: Optional[int] = None,
    ) -> List[str]:
        """
        Apply several patches in one backend write.

        With ``expires_before`` each patch goes to every record of that id
        whose payment deadline is earlier than the given time, rather than to
        the newest record only.

        Returns:
            The ids whose records actually changed.
        """
        cleaned = {order_id: clean_patch(patch) for order_id, patch in patches.items()}
        if not cleaned:
            return []
        with self._lock:
            changed = self.backend.update_many(
                cleaned,
                expected_status=expected_status,
                expires_before=expires_before,
            )
            if changed:
                self._publish()
            return changed

    def delete(self, order_id: str) -> bool:
        """Remove the order. Unknown ids are ignored (returns False)."""
        with self._lock:
            removed = self.backend.delete(order_id)
            if removed:
                logger.info("Order %s deleted", order_id)
                self._publish()
            return removed

    def wipe_all(self) -> None:
        """Delete every order and restart queue numbers at 1."""
        with self._lock:
            self.backend.wipe()
            logger.warning("All orders wiped")
            self._publish()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_all(self) -> List[Order]:
        return self.backend.list_orders()

    def snapshot(self) -> List[Order]:
        """All orders, newest first, capped at the history limit."""
        orders = sorted(self.list_all(), key=lambda o: o.created_at, reverse=True)
        return orders[: self.history_limit]

    def get(self, order_id: str) -> Optional[Order]:
        """Newest order carrying ``order_id``, or None."""
        for order in self.snapshot():
            if order.id == order_id:
                return order
        return None

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register ``callback`` for snapshots; returns an unsubscribe function.

        The callback is invoked immediately with the current snapshot.
        """
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback

            snapshot = self.snapshot()
            if self._last_published is None:
                self._last_published = [order.to_doc() for order in snapshot]
            self._deliver(callback, snapshot)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def poll_changes(self) -> bool:
        """
        Re-read the backend and notify subscribers if it changed since the
        last snapshot they saw. Returns True when a notification went out.
        """
        with self._lock:
            snapshot = self.snapshot()
            docs = [order.to_doc() for order in snapshot]
            if self._last_published is None:
                self._last_published = docs
                return False
            if docs == self._last_published:
                return False
            logger.debug("Picked up external order changes")
            self._notify(snapshot, docs)
            return True

    def _publish(self) -> None:
        snapshot = self.snapshot()
        self._notify(snapshot, [order.to_doc() for order in snapshot])

    def _notify(self, snapshot: List[Order], docs: List[dict]) -> None:
        self._last_published = docs
        for callback in list(self._subscribers.values()):
            self._deliver(callback, snapshot)

    @staticmethod
    def _deliver(callback: Subscriber, snapshot: List[Order]) -> None:
        try:
            callback(list(snapshot))
        except Exception:
            logger.exception("Order subscriber failed")
