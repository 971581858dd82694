"""
Wipe every order from the configured store and restart queue numbers.

    python -m scan2order.reset_orders
"""

from typing import Optional

from dotenv import load_dotenv

from .store import OrderStore


def reset_orders(store: Optional[OrderStore] = None) -> None:
    owns_store = store is None
    if store is None:
        from .app_factory import build_store
        store = build_store()

    try:
        store.wipe_all()
        print("Orders cleared and queue numbers reset.")
    finally:
        if owns_store:
            store.backend.close()


if __name__ == "__main__":
    load_dotenv()
    from .logging_config import setup_logging
    setup_logging()
    reset_orders()
