"""
Persistence contract for the order collection and the JSON-file backend.

Every backend offers the same operations:

- list_orders() -> [Order]
- insert(order, limit): prepend, keep only the ``limit`` most recent
- update(order_id, patch, expected_status=None) -> bool
- update_many({order_id: patch}, expected_status=None, expires_before=None)
  -> [order_id, ...] actually changed
- delete(order_id) -> bool
- wipe(): drop every order and reset the queue sequence
- next_sequence(year) -> int

``expected_status`` turns an update into a compare-and-set: the record is only
touched if its status still matches. The expiry sweep uses it so a sweep that
read a stale snapshot cannot cancel an order staff just marked Paid.

Queue numbers restart every year, so an id can appear on more than one record
when old orders were never wiped. Id-addressed operations act on the newest
record carrying that id. ``expires_before`` changes that for the sweep: the
patch then goes to every record with the id whose ``expires_at`` is earlier
than the given time (and whose status matches ``expected_status``), however
old it is.
"""

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..domain import Order, OrderStatus, UPDATABLE_FIELDS
from ..timestamps import to_epoch_ms
from .sequence import QueueSequence

logger = logging.getLogger(__name__)

# camelCase spellings accepted in patches coming from the wire
_PATCH_ALIASES = {
    "pickupName": "pickup_name",
    "marketingOptIn": "marketing_opt_in",
    "expiresAt": "expires_at",
}


def clean_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a partial update and convert it to domain values.

    Raises:
        ValueError: for fields that are fixed at creation (id, items, total,
                    created_at) or unknown, and for an unknown status.
    """
    cleaned: Dict[str, Any] = {}
    for key, value in patch.items():
        field = _PATCH_ALIASES.get(key, key)
        if field not in UPDATABLE_FIELDS:
            raise ValueError(f"Field cannot be updated: {key}")
        if field == "status":
            value = OrderStatus(value)
        elif field == "expires_at":
            value = to_epoch_ms(value)
        cleaned[field] = value
    return cleaned


def order_from_doc(doc: Any) -> Optional[Order]:
    """Build an Order from a stored document, normalizing its timestamps."""
    if not isinstance(doc, dict):
        return None
    data = dict(doc)
    try:
        for key in ("createdAt", "created_at", "expiresAt", "expires_at"):
            if key in data:
                data[key] = to_epoch_ms(data[key])
        return Order.model_validate(data)
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning("Skipping unreadable order record %r: %s", data.get("id"), e)
        return None


class OrderBackend(ABC):
    """Storage for the order collection and the queue counter."""

    name = "base"

    @abstractmethod
    def list_orders(self) -> List[Order]:
        ...

    @abstractmethod
    def insert(self, order: Order, limit: int) -> None:
        ...

    @abstractmethod
    def update(
        self,
        order_id: str,
        patch: Dict[str, Any],
        expected_status: Optional[OrderStatus] = None,
    ) -> bool:
        ...

    @abstractmethod
    def update_many(
        self,
        patches: Dict[str, Dict[str, Any]],
        expected_status: Optional[OrderStatus] = None,
        expires_before: Optional[int] = None,
    ) -> List[str]:
        """Apply several patches in one write; returns the ids that changed."""

    @abstractmethod
    def delete(self, order_id: str) -> bool:
        ...

    @abstractmethod
    def wipe(self) -> None:
        ...

    @abstractmethod
    def next_sequence(self, year: int) -> int:
        ...

    def close(self) -> None:
        """Release resources held by the backend."""


class JsonFileBackend(OrderBackend):
    """
    Orders kept in one local JSON document, the per-device store.

    Document layout::

        {"orders": [<newest first>...], "sequence": {"year": 2025, "n": 12}}

    Every write rewrites the whole document (temp file + rename). A lock
    serializes writers inside this process; two processes sharing the file
    race and the later write wins.
    """

    name = "json"

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Document I/O
    # -------------------------------------------------------------------------

    def _read_document(self) -> Dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Could not read order file %s: %s", self.path, e)
            return {}

        try:
            doc = json.loads(raw)
        except ValueError:
            logger.warning("Order file %s is not valid JSON; treating it as empty", self.path)
            return {}

        if not isinstance(doc, dict):
            logger.warning("Order file %s has an unexpected layout; treating it as empty", self.path)
            return {}
        return doc

    def _write_document(self, doc: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(doc, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)

    @staticmethod
    def _orders_in(doc: Dict[str, Any]) -> List[Order]:
        raw_orders = doc.get("orders")
        if not isinstance(raw_orders, list):
            return []
        orders = []
        for raw in raw_orders:
            order = order_from_doc(raw)
            if order is not None:
                orders.append(order)
        return orders

    def _save_orders(self, doc: Dict[str, Any], orders: List[Order]) -> None:
        doc["orders"] = [order.to_doc() for order in orders]
        self._write_document(doc)

    @staticmethod
    def _index_of(orders: List[Order], order_id: str) -> Optional[int]:
        newest = None
        for i, order in enumerate(orders):
            if order.id != order_id:
                continue
            if newest is None or order.created_at > orders[newest].created_at:
                newest = i
        return newest

    # -------------------------------------------------------------------------
    # Contract
    # -------------------------------------------------------------------------

    def list_orders(self) -> List[Order]:
        with self._lock:
            return self._orders_in(self._read_document())

    def insert(self, order: Order, limit: int) -> None:
        with self._lock:
            doc = self._read_document()
            orders = [order] + self._orders_in(doc)
            self._save_orders(doc, orders[:limit])

    def _targets(
        self,
        orders: List[Order],
        order_id: str,
        expected_status: Optional[OrderStatus],
        expires_before: Optional[int],
    ) -> List[int]:
        if expires_before is not None:
            return [
                i for i, order in enumerate(orders)
                if order.id == order_id
                and (expected_status is None or order.status == expected_status)
                and order.expires_at is not None
                and order.expires_at < expires_before
            ]
        i = self._index_of(orders, order_id)
        if i is None:
            return []
        if expected_status is not None and orders[i].status != expected_status:
            return []
        return [i]

    def _apply(
        self,
        orders: List[Order],
        order_id: str,
        patch: Dict[str, Any],
        expected_status: Optional[OrderStatus],
        expires_before: Optional[int] = None,
    ) -> bool:
        targets = self._targets(orders, order_id, expected_status, expires_before)
        for i in targets:
            orders[i] = orders[i].model_copy(update=patch)
        return bool(targets)

    def update(self, order_id, patch, expected_status=None) -> bool:
        with self._lock:
            doc = self._read_document()
            orders = self._orders_in(doc)
            if not self._apply(orders, order_id, patch, expected_status):
                return False
            self._save_orders(doc, orders)
            return True

    def update_many(self, patches, expected_status=None, expires_before=None) -> List[str]:
        with self._lock:
            doc = self._read_document()
            orders = self._orders_in(doc)
            changed = [
                order_id for order_id, patch in patches.items()
                if self._apply(orders, order_id, patch, expected_status, expires_before)
            ]
            if changed:
                self._save_orders(doc, orders)
            return changed

    def delete(self, order_id: str) -> bool:
        with self._lock:
            doc = self._read_document()
            orders = self._orders_in(doc)
            i = self._index_of(orders, order_id)
            if i is None:
                return False
            del orders[i]
            self._save_orders(doc, orders)
            return True

    def wipe(self) -> None:
        with self._lock:
            self._write_document({"orders": []})

    def next_sequence(self, year: int) -> int:
        with self._lock:
            doc = self._read_document()
            current = QueueSequence.from_doc(doc.get("sequence")) or QueueSequence(year=year)
            advanced = current.advance(year)
            doc["sequence"] = advanced.to_doc()
            self._write_document(doc)
            return advanced.n
