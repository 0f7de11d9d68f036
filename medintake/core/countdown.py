# medintake/core/countdown.py
"""
ETA countdown for dispatched responders.

Once a dispatch session is resolved, a recurring tick lowers the ETA by one
minute per interval until it reaches zero. The countdown is owned by exactly
one session and is cancelled when that session is discarded.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from medintake.models.results import DispatchResult

logger = logging.getLogger(__name__)

TickCallback = Callable[[DispatchResult], None]
SleepFunction = Callable[[float], Awaitable[None]]


class EtaCountdown:
    """Cancellable timer handle that counts a DispatchResult's ETA down to zero"""

    def __init__(
        self,
        result: DispatchResult,
        interval_seconds: float = 60.0,
        on_tick: Optional[TickCallback] = None,
        sleep: SleepFunction = asyncio.sleep
    ):
        """
        Args:
            result: Assignment whose eta_minutes is decremented
            interval_seconds: Wall-clock period between ticks
            on_tick: Called after every effective tick
            sleep: Awaitable sleep, replaceable in tests
        """
        self.result = result
        self.interval_seconds = interval_seconds
        self.on_tick = on_tick
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def finished(self) -> bool:
        return self.result.eta_minutes == 0

    def tick(self) -> bool:
        """Lower the ETA by one minute. Returns False when nothing changed."""
        if self._cancelled or self.result.eta_minutes <= 0:
            return False

        self.result.eta_minutes = max(0, self.result.eta_minutes - 1)
        self.ticks += 1
        logger.debug(f"ETA tick for {self.result.vehicle_number}: {self.result.eta_minutes} min")

        if self.on_tick:
            try:
                self.on_tick(self.result)
            except Exception as e:
                logger.warning(f"ETA tick callback failed: {e}")

        return True

    def start(self) -> None:
        """Start ticking in the running event loop. No-op if started or already at zero."""
        if self._cancelled or self._task is not None or self.finished:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while not self._cancelled and self.result.eta_minutes > 0:
            await self._sleep(self.interval_seconds)
            if self._cancelled:
                break
            self.tick()

        if self.finished:
            logger.info(f"Responder {self.result.vehicle_number} has arrived (ETA 0)")

    def cancel(self) -> None:
        """Stop the countdown for good. Safe to call repeatedly."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait for the countdown to stop (arrival or cancellation)"""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise
