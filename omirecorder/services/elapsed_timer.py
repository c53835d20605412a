"""Elapsed-time tick source for the active recording."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ElapsedTimer:
    """Counts whole intervals while a recording is active.

    The timer runs as a task on the controller's event loop, so ticks are
    serialized with every other session transition.
    """

    def __init__(self, interval: float = 1.0, on_tick: Optional[Callable[[int], None]] = None):
        """Initialize timer.

        Args:
            interval: Seconds between ticks
            on_tick: Called with the new count after every tick
        """
        self.interval = interval
        self.on_tick = on_tick
        self.elapsed_seconds = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Reset to zero and begin ticking. Needs a running event loop."""
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Elapsed timer started (interval={self.interval}s)")

    def stop(self) -> None:
        """Stop ticking and reset to zero."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug(f"Elapsed timer stopped at {self.elapsed_seconds}s")
        self.elapsed_seconds = 0

    def tick(self) -> None:
        """Advance by one interval. Ignored while the timer is stopped."""
        if not self.is_running:
            return
        self.elapsed_seconds += 1
        if self.on_tick is not None:
            self.on_tick(self.elapsed_seconds)

    async def _run(self) -> None:
        # Schedule against the loop clock so slow callbacks don't accumulate drift
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            self.tick()
            next_tick += self.interval
