"""
Request-scoped accessors for the per-process singletons.

``create_app`` builds one OrderStore, one LifecycleController, one cart cache
and one catalog and stores them on ``app.state``. Routes pull them in with
``Depends(...)`` so tests can hand ``create_app`` their own instances.
"""

from fastapi import Request

from .catalog import Catalog
from .lifecycle import LifecycleController
from .services.cart_sessions import CartSessionCache
from .store import OrderStore


def get_store(request: Request) -> OrderStore:
    return request.app.state.store


def get_controller(request: Request) -> LifecycleController:
    return request.app.state.controller


def get_carts(request: Request) -> CartSessionCache:
    return request.app.state.carts


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog
