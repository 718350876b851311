"""Periodic removal of expired cache entries.

Nothing is scheduled on import. The embedding application calls
initialize_sweeper() once with a scheduler of its choice:

    host = AsyncIOSchedulerHost()
    sweeper = initialize_sweeper(engine, host)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Protocol, runtime_checkable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from storage_cache.config import parse_duration_option
from storage_cache.engine import CacheEngine, now_ms
from storage_cache.errors import InvalidArgumentError
from storage_cache.types import Duration

logger = logging.getLogger(__name__)

SWEEPER_JOB_NAME = "storage-cache-sweeper"


@runtime_checkable
class Scheduler(Protocol):
    """Host facility for running a callback repeatedly."""

    def schedule_recurring(
        self,
        name: str,
        callback: Callable[[], Awaitable[object]],
        *,
        delay_ms: int,
        period_ms: int,
    ) -> None:
        """Run callback after delay_ms, then every period_ms."""
        ...


class ExpirationSweeper:
    """Deletes expired entries, ignoring triggers that arrive too close together.

    Host schedulers can deliver the same alarm more than once; a run less
    than ``min_interval`` after the previous one is skipped.
    """

    def __init__(self, engine: CacheEngine, *, min_interval: Duration = "1s") -> None:
        self._engine = engine
        self._min_interval = parse_duration_option("min_interval", min_interval)
        self._last_run: int | None = None

    @property
    def last_run(self) -> int | None:
        return self._last_run

    async def run(self) -> int | None:
        """Sweep once. Returns the number of removed entries, or None if skipped."""
        now = now_ms()
        if self._last_run is not None and now - self._last_run < self._min_interval:
            logger.debug("Sweep skipped, last run %sms ago", now - self._last_run)
            return None

        self._last_run = now
        removed = await self._engine.delete_expired()
        logger.info("Sweep removed %d expired cache entries", removed)
        return removed

    async def run_scheduled(self) -> None:
        """Scheduler entry point: like run(), but failures are only logged."""
        try:
            await self.run()
        except Exception:
            logger.exception("Sweep of expired cache entries failed")


def initialize_sweeper(
    engine: CacheEngine,
    scheduler: Scheduler,
    *,
    delay: Duration = "1m",
    period: Duration = "1d",
    min_interval: Duration = "1s",
) -> ExpirationSweeper:
    """Register a sweeper for engine with the host scheduler.

    Args:
        engine: Cache engine to sweep
        scheduler: Host scheduler
        delay: Wait before the first sweep, to stay out of startup work
        period: Time between sweeps
        min_interval: Minimum time between two actual sweeps

    Returns:
        The registered ExpirationSweeper
    """
    period_ms = parse_duration_option("period", period)
    if period_ms <= 0:
        raise InvalidArgumentError("period must be positive")
    delay_ms = parse_duration_option("delay", delay)

    sweeper = ExpirationSweeper(engine, min_interval=min_interval)
    scheduler.schedule_recurring(
        SWEEPER_JOB_NAME,
        sweeper.run_scheduled,
        delay_ms=delay_ms,
        period_ms=period_ms,
    )
    return sweeper


class AsyncIOSchedulerHost:
    """Scheduler backed by APScheduler's AsyncIOScheduler.

    Must be used from within a running event loop. A scheduler passed in is
    left to its owner; one created here is started on first use and stopped
    by shutdown().
    """

    def __init__(self, scheduler: AsyncIOScheduler | None = None) -> None:
        self._owned = scheduler is None
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def schedule_recurring(
        self,
        name: str,
        callback: Callable[[], Awaitable[object]],
        *,
        delay_ms: int,
        period_ms: int,
    ) -> None:
        start = datetime.now(timezone.utc) + timedelta(milliseconds=delay_ms)
        trigger = IntervalTrigger(
            seconds=period_ms / 1000,
            start_date=start,
            timezone=timezone.utc,
        )
        self._scheduler.add_job(
            callback,
            trigger=trigger,
            id=name,
            name=name,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        if self._owned and not self._scheduler.running:
            self._scheduler.start()
            logger.info("AsyncIOScheduler started")

    def shutdown(self) -> None:
        if self._owned and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("AsyncIOScheduler stopped")
