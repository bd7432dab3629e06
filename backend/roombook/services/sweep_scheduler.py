# backend/roombook/services/sweep_scheduler.py
"""
In-process periodic sweep.

Owned by the application lifespan. Deployments that run Celery beat can
leave it disabled (SCHEDULER_ENABLED=false); both call the same
PassedReservationSweeper.sweep entry point.
"""

import asyncio
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from .passed_reservation_sweeper import PassedReservationSweeper

logger = logging.getLogger(__name__)


class SweepScheduler:
    """
    Runs the passed-reservation sweep every `interval_seconds`.

    start() on a running scheduler and stop() on a stopped one are no-ops.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        interval_seconds: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds or settings.sweep_interval_seconds
        self._task: Optional[asyncio.Task[None]] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        """Sweep with a fresh session; returns the number of rows transitioned."""
        db = self.session_factory()
        try:
            return PassedReservationSweeper(db).sweep()
        finally:
            db.close()

    async def _loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                count = await asyncio.to_thread(self.run_once)
                if count:
                    logger.info(f"Scheduled sweep marked {count} reservation(s) as passed")
            except Exception as e:
                logger.error(f"Scheduled sweep failed: {str(e)}")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue

    async def start(self) -> None:
        if self.running:
            logger.debug("Sweep scheduler already running")
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop(self._stop_event))
        logger.info(f"Sweep scheduler started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        task, stop_event = self._task, self._stop_event
        if task is None or stop_event is None or task.done():
            return
        stop_event.set()
        try:
            await asyncio.wait_for(task, timeout=self.interval_seconds)
        except asyncio.TimeoutError:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._stop_event = None
        logger.info("Sweep scheduler stopped")
