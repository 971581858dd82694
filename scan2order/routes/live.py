"""
Live Order Feed
===============

WebSocket /ws/orders streams the order collection whenever it changes.

Query parameters:
-----------------
- mode=customer (default): each message lists ``{id, status}`` pairs only,
  enough for a "your order is ready" screen without exposing names, phone
  numbers or notes
- mode=staff&pin=...: each message carries the full orders; a missing or
  wrong PIN closes the socket with 1008

Message format::

    {"type": "orders", "mode": "staff", "orders": [...newest first...]}

The first message is the current snapshot, sent right after the socket opens.

Threading:
----------
Store notifications can fire on any thread (sync endpoints run in a thread
pool, the change watcher runs on the loop). The subscriber callback only
hands the snapshot to this socket's event loop with ``call_soon_threadsafe``;
sending happens in the pump task.
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from ..auth import pin_matches
from ..domain import Order
from ..schemas.orders import OrderStatusOut

logger = logging.getLogger(__name__)

live_router = APIRouter(tags=["Live"])


def render_snapshot(orders: List[Order], staff: bool) -> dict:
    if staff:
        payload = [order.to_doc() for order in orders]
    else:
        payload = [OrderStatusOut.from_order(order).to_doc() for order in orders]
    return {
        "type": "orders",
        "mode": "staff" if staff else "customer",
        "orders": payload,
    }


async def _pump(websocket: WebSocket, queue: asyncio.Queue, staff: bool) -> None:
    while True:
        snapshot = await queue.get()
        await websocket.send_json(render_snapshot(snapshot, staff))


async def _drain(websocket: WebSocket) -> None:
    # Clients do not send anything meaningful; reading detects the disconnect
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass


@live_router.websocket("/ws/orders")
async def orders_feed(
    websocket: WebSocket,
    mode: str = "customer",
    pin: Optional[str] = None,
):
    staff = mode == "staff"
    if staff and not pin_matches(pin):
        logger.warning("Rejected staff feed connection with a bad PIN")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    store = websocket.app.state.store
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(snapshot: List[Order]) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, snapshot)

    unsubscribe = store.subscribe(on_change)
    logger.debug("Order feed opened (%s)", "staff" if staff else "customer")
    try:
        tasks = {
            asyncio.create_task(_pump(websocket, queue, staff)),
            asyncio.create_task(_drain(websocket)),
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.debug("Order feed ended: %r", task.exception())
    finally:
        unsubscribe()
        logger.debug("Order feed closed")
