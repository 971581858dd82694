"""
SQL backend for the order collection (SQLAlchemy).

Unlike the JSON document, each operation here is a small transaction:
status changes are single-row UPDATEs, so two writers changing different
orders never overwrite each other. The queue counter row is read
``FOR UPDATE`` where the database supports it.

Timestamps are stored as native ``DateTime`` columns and converted back to
epoch milliseconds by ``to_epoch_ms`` before leaving this module.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..db import session_scope
from ..domain import Order, OrderStatus
from ..models import OrderRecord, QueueCounter
from ..timestamps import from_epoch_ms, to_epoch_ms
from .backends import OrderBackend
from .sequence import QueueSequence

logger = logging.getLogger(__name__)

_COUNTER_ROW_ID = 1


def _record_to_order(record: OrderRecord) -> Order:
    return Order(
        id=record.queue_number,
        items=record.items or [],
        total=record.total,
        status=record.status,
        created_at=to_epoch_ms(record.created_at),
        expires_at=to_epoch_ms(record.expires_at),
        note=record.note,
        pickup_name=record.pickup_name,
        phone=record.phone,
        marketing_opt_in=bool(record.marketing_opt_in),
    )


def _column_values(patch: Dict[str, Any]) -> Dict[str, Any]:
    values = {}
    for field, value in patch.items():
        if field == "status":
            value = OrderStatus(value).value
        elif field == "expires_at":
            value = from_epoch_ms(value)
        values[field] = value
    return values


class SqlBackend(OrderBackend):
    """Orders as rows of the ``orders`` table."""

    name = "sql"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _newest(self, db: Session, order_id: str) -> Optional[OrderRecord]:
        return (
            db.query(OrderRecord)
            .filter(OrderRecord.queue_number == order_id)
            .order_by(OrderRecord.created_at.desc(), OrderRecord.pk.desc())
            .first()
        )

    def list_orders(self) -> List[Order]:
        try:
            with session_scope(self.session_factory) as db:
                records = (
                    db.query(OrderRecord)
                    .order_by(OrderRecord.created_at.desc(), OrderRecord.pk.desc())
                    .all()
                )
                orders = []
                for record in records:
                    try:
                        orders.append(_record_to_order(record))
                    except (ValidationError, ValueError) as e:
                        logger.warning("Skipping unreadable order row %s: %s", record.pk, e)
                return orders
        except SQLAlchemyError as e:
            logger.warning("Could not read orders from the database: %s", e)
            return []

    def insert(self, order: Order, limit: int) -> None:
        with session_scope(self.session_factory) as db:
            db.add(OrderRecord(
                queue_number=order.id,
                status=order.status.value,
                items=[item.to_doc() for item in order.items],
                total=order.total,
                created_at=from_epoch_ms(order.created_at),
                expires_at=from_epoch_ms(order.expires_at),
                note=order.note,
                pickup_name=order.pickup_name,
                phone=order.phone,
                marketing_opt_in=order.marketing_opt_in,
            ))
            db.flush()

            stale = [
                pk for (pk,) in (
                    db.query(OrderRecord.pk)
                    .order_by(OrderRecord.created_at.desc(), OrderRecord.pk.desc())
                    .offset(limit)
                    .all()
                )
            ]
            if stale:
                db.query(OrderRecord).filter(OrderRecord.pk.in_(stale)).delete(
                    synchronize_session=False
                )
                logger.debug("Trimmed %d old orders", len(stale))

    def _update_row(
        self,
        db: Session,
        order_id: str,
        patch: Dict[str, Any],
        expected_status: Optional[OrderStatus],
    ) -> bool:
        record = self._newest(db, order_id)
        if record is None:
            return False
        query = db.query(OrderRecord).filter(OrderRecord.pk == record.pk)
        if expected_status is not None:
            query = query.filter(OrderRecord.status == OrderStatus(expected_status).value)
        return query.update(_column_values(patch), synchronize_session=False) > 0

    def update(self, order_id, patch, expected_status=None) -> bool:
        with session_scope(self.session_factory) as db:
            return self._update_row(db, order_id, patch, expected_status)

    def _update_overdue_rows(
        self,
        db: Session,
        order_id: str,
        patch: Dict[str, Any],
        expected_status: Optional[OrderStatus],
        expires_before: int,
    ) -> bool:
        query = db.query(OrderRecord).filter(
            OrderRecord.queue_number == order_id,
            OrderRecord.expires_at.isnot(None),
            OrderRecord.expires_at < from_epoch_ms(expires_before),
        )
        if expected_status is not None:
            query = query.filter(OrderRecord.status == OrderStatus(expected_status).value)
        return query.update(_column_values(patch), synchronize_session=False) > 0

    def update_many(self, patches, expected_status=None, expires_before=None) -> List[str]:
        with session_scope(self.session_factory) as db:
            changed = []
            for order_id, patch in patches.items():
                if expires_before is not None:
                    updated = self._update_overdue_rows(
                        db, order_id, patch, expected_status, expires_before
                    )
                else:
                    updated = self._update_row(db, order_id, patch, expected_status)
                if updated:
                    changed.append(order_id)
            return changed

    def delete(self, order_id: str) -> bool:
        with session_scope(self.session_factory) as db:
            record = self._newest(db, order_id)
            if record is None:
                return False
            db.delete(record)
            return True

    def wipe(self) -> None:
        with session_scope(self.session_factory) as db:
            db.query(OrderRecord).delete(synchronize_session=False)
            db.query(QueueCounter).delete(synchronize_session=False)

    def next_sequence(self, year: int) -> int:
        with session_scope(self.session_factory) as db:
            counter = (
                db.query(QueueCounter)
                .filter(QueueCounter.id == _COUNTER_ROW_ID)
                .with_for_update()
                .first()
            )
            if counter is None:
                counter = QueueCounter(id=_COUNTER_ROW_ID, year=year, n=0)
                db.add(counter)

            advanced = QueueSequence(year=counter.year, n=counter.n).advance(year)
            counter.year = advanced.year
            counter.n = advanced.n
            return advanced.n

    def close(self) -> None:
        engine = self.session_factory.kw.get("bind")
        if engine is not None:
            engine.dispose()
