"""
============================================================================
MONITOR CHECK ENGINE - BACKGROUND JOB SCHEDULER
============================================================================
A small asyncio-native scheduler for the engine's periodic housekeeping.
All jobs run as coroutines in the same event loop.

When checks run is the caller's business; this only drives maintenance.

Registered Jobs
---------------
1.  cert_cache_clear        (every MONITOR_CACHE_SWEEP_INTERVAL, 60 s)
    Clears the certificate notification dedup cache when the local time
    falls in the daily clear window (00:00).
============================================================================
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Set

from config.settings import Settings, get_settings
from monitoring.notifications import CertificateNotificationGate
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("Scheduler")


# ============================================================================
# JOB DEFINITION
# ============================================================================

@dataclass
class ScheduledJob:
    """
    A periodic background job.

    ``next_run`` is an epoch timestamp. It advances in whole intervals from
    the registration time, so a late tick does not shift later runs.
    """
    name: str
    interval_seconds: float
    coroutine_factory: Callable[[], Awaitable[None]]
    next_run: float = field(default_factory=time.time)


# ============================================================================
# SCHEDULER
# ============================================================================

class Scheduler:
    """
    Asyncio-based periodic job scheduler.

    Usage
    -----
        scheduler = Scheduler(engine.gate)
        await scheduler.start()
        # ... later ...
        await scheduler.stop()
    """

    def __init__(
        self,
        gate: Optional[CertificateNotificationGate] = None,
        settings: Optional[Settings] = None,
        tick_interval: float = 1.0,
    ):
        self.settings = settings or get_settings()
        self.gate = gate

        self._jobs: Dict[str, ScheduledJob] = {}
        self._running = False
        self._loop_task: Optional[asyncio.Task] = None
        self._job_tasks: Set[asyncio.Task] = set()
        self._tick_interval = tick_interval

        if gate is not None:
            self._register_builtin_jobs()

    # ------------------------------------------------------------------
    # JOB REGISTRATION
    # ------------------------------------------------------------------

    def register_job(
        self,
        name: str,
        interval_seconds: float,
        coroutine_factory: Callable[[], Awaitable[None]],
    ) -> None:
        """
        Register a periodic job. It first runs on the next tick.
        """
        if name in self._jobs:
            logger.warning(f"[Scheduler] Job '{name}' already registered, overwriting")

        self._jobs[name] = ScheduledJob(
            name=name,
            interval_seconds=interval_seconds,
            coroutine_factory=coroutine_factory,
            next_run=time.time(),
        )
        logger.debug(f"[Scheduler] Registered job '{name}' (interval={interval_seconds}s)")

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the scheduler loop."""
        if self._running:
            logger.warning("Scheduler is already running")
            return
        self._running = True
        self._loop_task = asyncio.create_task(self._main_loop())
        logger.info("Scheduler started")

    async def stop(self) -> None:
        """Stop the loop and wait for jobs that are still running."""
        self._running = False
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        if self._job_tasks:
            await asyncio.gather(*list(self._job_tasks), return_exceptions=True)
        logger.info("Scheduler stopped")

    # ------------------------------------------------------------------
    # MAIN LOOP
    # ------------------------------------------------------------------

    def launch_due_jobs(self, now: Optional[float] = None) -> List[asyncio.Task]:
        """
        Start every job whose next_run has arrived and advance its
        next_run. Returns the tasks that were started.

        Slots missed while the loop was stalled are skipped, not replayed.
        """
        now = time.time() if now is None else now
        launched = []
        for job in self._jobs.values():
            if now < job.next_run:
                continue
            task = asyncio.create_task(self._execute_job(job))
            self._job_tasks.add(task)
            task.add_done_callback(self._job_tasks.discard)
            launched.append(task)

            job.next_run += job.interval_seconds
            if job.next_run <= now:
                missed = (now - job.next_run) // job.interval_seconds + 1
                job.next_run += missed * job.interval_seconds
        return launched

    async def _main_loop(self) -> None:
        logger.info("[Scheduler] Main loop started")
        while self._running:
            self.launch_due_jobs()
            try:
                await asyncio.sleep(self._tick_interval)
            except asyncio.CancelledError:
                break
        logger.info("[Scheduler] Main loop exited")

    # ------------------------------------------------------------------
    # JOB EXECUTION
    # ------------------------------------------------------------------

    async def _execute_job(self, job: ScheduledJob) -> None:
        """Run a single job; failures are logged and never stop the loop."""
        start_time = time.perf_counter()
        try:
            await job.coroutine_factory()
        except Exception as e:
            logger.opt(exception=e).error(
                f"[Scheduler] Job '{job.name}' failed after "
                f"{time.perf_counter() - start_time:.2f}s: {e}"
            )
            return

        logger.debug(
            f"[Scheduler] Job '{job.name}' completed in "
            f"{time.perf_counter() - start_time:.2f}s"
        )

    # ==================================================================
    # BUILT-IN JOBS
    # ==================================================================

    def _register_builtin_jobs(self) -> None:
        self.register_job(
            "cert_cache_clear",
            interval_seconds=self.settings.monitoring.cache_sweep_interval,
            coroutine_factory=self._job_cert_cache_clear,
        )

    async def _job_cert_cache_clear(self) -> None:
        await self.gate.clear_if_midnight(TimeHelper.now_in(self.settings.timezone))
