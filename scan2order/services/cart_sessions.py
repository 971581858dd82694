"""
Cart Session Cache
==================

Each customer device builds its cart on the server under a random session id.
Carts are only held in memory: a cart is not worth persisting, and a
restart simply hands the customer an empty cart.

Cache Eviction Strategy:
------------------------
1. **TTL-based**: Carts not touched within ``ttl_seconds`` are dropped.
   Checked probabilistically (~1% of reads) to avoid a dedicated timer.

2. **LRU-based**: When the cache reaches ``max_size``, the oldest 10% of carts
   (by last access time) are evicted to make room.

Thread Safety:
--------------
All cache operations are protected by a threading.Lock because FastAPI runs
sync endpoints in a thread pool. ``update`` applies a cart transformation
under the lock so two taps on the same device cannot lose an item.
"""

import logging
import random
import threading
import time
import uuid
from typing import Callable, Dict, Optional

from .. import config
from ..cart import Cart

logger = logging.getLogger(__name__)


class CartSessionCache:
    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        max_size: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else config.CART_TTL_SECONDS
        self.max_size = max_size if max_size is not None else config.CART_MAX_CACHE_SIZE
        self.clock = clock
        # {session_id: {"cart": [...], "last_access": timestamp}}
        self._entries: Dict[str, Dict] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._entries

    def new_session(self) -> str:
        """Start an empty cart and return its session id."""
        session_id = uuid.uuid4().hex
        self.set(session_id, [])
        return session_id

    def get(self, session_id: str) -> Cart:
        """Current cart for the session; unknown or expired sessions read as empty."""
        if random.randint(1, 100) == 1:
            self.cleanup_expired()

        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return []
            entry["last_access"] = self.clock()
            return list(entry["cart"])

    def set(self, session_id: str, cart: Cart) -> None:
        with self._lock:
            self._store(session_id, cart)

    def update(self, session_id: str, change: Callable[[Cart], Cart]) -> Cart:
        """Replace the session's cart with ``change(cart)`` and return it."""
        with self._lock:
            entry = self._entries.get(session_id)
            current = list(entry["cart"]) if entry else []
            updated = change(current)
            self._store(session_id, updated)
            return list(updated)

    def take(self, session_id: str) -> Cart:
        """Return the session's cart and leave it empty, in one step.

        Two submissions racing on the same session cannot both get the items.
        """
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return []
            cart = list(entry["cart"])
            self._store(session_id, [])
            return cart

    def restore(self, session_id: str, cart: Cart) -> Cart:
        """Put back a cart returned by ``take`` unless the customer started a new one."""
        return self.update(session_id, lambda current: current or list(cart))

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._entries.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup_expired(self) -> int:
        """Remove carts idle for longer than the TTL; returns how many went."""
        now = self.clock()
        with self._lock:
            expired = [
                sid for sid, entry in self._entries.items()
                if now - entry["last_access"] > self.ttl_seconds
            ]
            for sid in expired:
                del self._entries[sid]

        if expired:
            logger.debug("Cleaned up %d idle carts", len(expired))
        return len(expired)

    def _store(self, session_id: str, cart: Cart) -> None:
        # Caller holds the lock
        if session_id not in self._entries and len(self._entries) >= self.max_size:
            self._evict_oldest(max(1, self.max_size // 10))
        self._entries[session_id] = {"cart": list(cart), "last_access": self.clock()}

    def _evict_oldest(self, count: int) -> None:
        oldest = sorted(self._entries.items(), key=lambda item: item[1]["last_access"])
        for sid, _ in oldest[:count]:
            del self._entries[sid]
        logger.debug("Evicted %d oldest carts", min(count, len(oldest)))
