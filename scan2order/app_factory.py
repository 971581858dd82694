"""
Application factory.

``create_app`` wires one OrderStore, its LifecycleController, the cart cache
and the catalog into a FastAPI application, and owns the two background
timers (expiry sweep and change watcher) through the app lifespan.

Tests pass their own store (in-memory SQLite or a tmp JSON file) and usually
``background_tasks=False`` so nothing runs on a timer behind their back.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import __version__, config
from .background import PeriodicTask
from .catalog import CATALOG, Catalog
from .db import create_db_engine, create_session_factory
from .lifecycle import LifecycleController
from .middleware import RequestIDMiddleware
from .routes import (
    cart_router,
    catalog_router,
    limiter,
    live_router,
    orders_router,
    staff_orders_router,
)
from .services.cart_sessions import CartSessionCache
from .store import JsonFileBackend, OrderStore, SqlBackend

logger = logging.getLogger(__name__)


def build_store(backend_name: Optional[str] = None) -> OrderStore:
    """
    Create the OrderStore for the configured backend.

    Raises:
        ValueError: if STORE_BACKEND is neither "sql" nor "json".
    """
    name = (backend_name or config.STORE_BACKEND).strip().lower()
    if name == "json":
        backend = JsonFileBackend(config.ORDERS_JSON_PATH)
        logger.info("Using JSON order store at %s", config.ORDERS_JSON_PATH)
    elif name == "sql":
        backend = SqlBackend(create_session_factory(create_db_engine()))
        logger.info("Using SQL order store")
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {name!r} (expected 'sql' or 'json')")
    return OrderStore(backend)


def create_app(
    store: Optional[OrderStore] = None,
    carts: Optional[CartSessionCache] = None,
    catalog: Optional[Catalog] = None,
    background_tasks: bool = True,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        store: Order store to serve; built from config when omitted (and then
               closed on shutdown)
        carts: Cart cache; a fresh one when omitted
        catalog: Menu; the built-in CATALOG when omitted
        background_tasks: Start the expiry sweep and change watcher timers

    Returns:
        Configured FastAPI application
    """
    owns_store = store is None
    if store is None:
        store = build_store()
    controller = LifecycleController(store)

    timers = [
        PeriodicTask("expiry-sweep", config.SWEEP_INTERVAL_SECONDS, controller.sweep),
        PeriodicTask(
            "order-change-watch",
            config.CHANGE_POLL_INTERVAL_SECONDS,
            store.poll_changes,
            run_at_start=False,
        ),
    ]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if background_tasks:
            for timer in timers:
                await timer.start()
        try:
            yield
        finally:
            for timer in timers:
                await timer.stop()
            if owns_store:
                store.backend.close()

    app = FastAPI(
        title="scan2order",
        description="QR-code counter ordering: customer cart and checkout, staff order board",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.controller = controller
    app.state.carts = carts if carts is not None else CartSessionCache()
    app.state.catalog = catalog or CATALOG
    app.state.timers = timers

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ORIGINS != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Configure rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.include_router(catalog_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(staff_orders_router)
    app.include_router(live_router)

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "store": store.backend.name,
            "subscribers": store.subscriber_count,
        }

    @app.get("/", include_in_schema=False)
    def root(request: Request):
        """``?mode=staff`` opens the staff board, anything else the menu."""
        if request.query_params.get("mode") == "staff":
            return RedirectResponse(url="/staff/orders")
        return RedirectResponse(url="/catalog")

    logger.info("Application created (store=%s)", store.backend.name)
    return app
