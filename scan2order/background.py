"""
Periodic background tasks run inside the application's event loop.

Two instances are started by the application lifespan:

- the expiry sweep (LifecycleController.sweep), every SWEEP_INTERVAL_SECONDS
- the change watcher (OrderStore.poll_changes), every
  CHANGE_POLL_INTERVAL_SECONDS

Both are cancelled on shutdown so no timer outlives the app.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run a synchronous ``action`` every ``interval_seconds``."""

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        action: Callable[[], Any],
        run_at_start: bool = True,
    ):
        self.name = name
        self.interval_seconds = interval_seconds
        self.action = action
        self.run_at_start = run_at_start
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info("Started %s task (every %.1fs)", self.name, self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stopped %s task", self.name)

    def run_once(self) -> Any:
        """Run the action now; errors are logged and swallowed so the loop survives."""
        try:
            return self.action()
        except Exception:
            logger.exception("Error in %s task", self.name)
            return None

    async def _loop(self) -> None:
        if self.run_at_start:
            self.run_once()
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                self.run_once()
            except asyncio.CancelledError:
                break
