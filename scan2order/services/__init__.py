"""
Services Package for scan2order
===============================

Business logic that sits between the HTTP routes and the core:

- **ordering**: turns a cart plus customer details into a persisted order
- **cart_sessions**: in-memory carts for customer devices, keyed by session id

Services receive their collaborators (the order store, a cart cache) as
arguments instead of reaching for module-level singletons.
"""

from . import ordering
from . import cart_sessions

__all__ = ["ordering", "cart_sessions"]
