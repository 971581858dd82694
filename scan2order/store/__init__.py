"""
Order Store package.

- backends: the persistence contract plus JSON-file and SQL implementations
- order_store: OrderStore, the single writer of order records
- sequence: yearly queue numbers
"""

from .backends import OrderBackend, JsonFileBackend, clean_patch
from .sql_backend import SqlBackend
from .order_store import OrderStore, Subscriber
from .sequence import QueueSequence, format_queue_number

__all__ = [
    "OrderBackend",
    "JsonFileBackend",
    "SqlBackend",
    "OrderStore",
    "Subscriber",
    "QueueSequence",
    "format_queue_number",
    "clean_patch",
]
