"""Repeating timer that drives the favorites monitor."""

import asyncio
from typing import Optional

from bidbot.core.logging import get_logger
from bidbot.monitor.service import AnnounceMonitor, MonitorCycleStats

logger = get_logger("monitor.scheduler")


class MonitorScheduler:
    """Runs monitor cycles on a fixed interval, one cycle at a time.

    The interval is measured from the end of one cycle to the start of
    the next, so a slow cycle delays the following tick instead of
    overlapping it.
    """

    def __init__(
        self,
        monitor: AnnounceMonitor,
        interval_seconds: float = 30.0,
        enabled: bool = True,
    ):
        self._monitor = monitor
        self._interval = interval_seconds
        self._enabled = enabled
        self._cycle_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()
        self.cycles_run = 0
        self.cycles_failed = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Optional[MonitorCycleStats]:
        """Run one cycle unless another one is still in flight.

        Cycle errors are logged and swallowed so the timer keeps going.
        """
        if self._cycle_lock.locked():
            logger.warning("Previous monitor cycle still running, skipping tick")
            return None

        async with self._cycle_lock:
            self.cycles_run += 1
            try:
                return await self._monitor.monitor_favorites_status()
            except Exception as e:
                self.cycles_failed += 1
                logger.error("Monitor cycle failed: %s", e)
                logger.debug("Monitor cycle failure details", exc_info=True)
                return None

    async def run_forever(self) -> None:
        """Run cycles until `stop()` is called."""
        if not self._enabled:
            logger.info("Announce monitor disabled (ANNOUNCE_MONITOR_ENABLED=false)")
            return

        logger.info("Announce monitor started, interval %.1fs", self._interval)
        self._stopping.clear()
        while not self._stopping.is_set():
            await self.run_once()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Announce monitor stopped")

    def start(self) -> asyncio.Task:
        """Start the timer as a background task on the running loop."""
        if self.is_running:
            return self._task
        self._task = asyncio.create_task(self.run_forever(), name="announce-monitor")
        return self._task

    async def stop(self) -> None:
        """Stop the timer, letting the current cycle finish."""
        self._stopping.set()
        if self._task is not None:
            await self._task
            self._task = None
