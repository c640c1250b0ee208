"""Probe scheduler: runs the executor forever at a fixed interval.

The interval is measured from the end of one cycle to the start of the next.
When a cycle job has finished, a one-shot APScheduler job is armed for
``now + interval``, so a slow cycle pushes the next one back instead of
overlapping it.

Usage:
    scheduler = ProbeScheduler(executor, metrics, interval_seconds=10)
    await scheduler.start()
    # ...
    await scheduler.stop()
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from services.ldap_probe.src.probe.executor import ProbeExecutor
from services.ldap_probe.src.probe.result import ProbeResult
from services.ldap_probe.src.telemetry.probe_metrics import ProbeMetrics

logger = logging.getLogger(__name__)

JOB_ID = "ldap_probe_cycle"


class ProbeScheduler:
    """Background scheduler feeding probe results into the metrics sink."""

    def __init__(
        self,
        executor: ProbeExecutor,
        metrics: ProbeMetrics,
        interval_seconds: float = 10.0,
    ) -> None:
        self.executor = executor
        self.metrics = metrics
        self.interval_seconds = float(interval_seconds)
        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self.is_running = False
        self.cycles_run = 0
        self.consecutive_failures = 0
        self.last_result: Optional[ProbeResult] = None
        self.last_cycle_end: Optional[datetime] = None
        self._cycle_in_flight = False
        self.scheduler.add_listener(self._on_cycle_done, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    def _arm(self, run_date: datetime) -> None:
        self.scheduler.add_job(
            self._run_cycle,
            trigger=DateTrigger(run_date=run_date),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=None,
        )

    async def _run_cycle(self) -> None:
        """One probe cycle (invoked by APScheduler)."""
        if not self.is_running:
            return

        self._cycle_in_flight = True
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, self.executor.run)
        except Exception:
            logger.exception("Probe cycle raised unexpectedly")
            result = None
        finally:
            self._cycle_in_flight = False

        if result is not None:
            self.metrics.publish(result)
            self.last_result = result
            if result.succeeded:
                self.consecutive_failures = 0
            else:
                self.consecutive_failures += 1
        else:
            self.consecutive_failures += 1
        self.cycles_run += 1
        self.last_cycle_end = datetime.now(timezone.utc)

    def _on_cycle_done(self, event: JobExecutionEvent) -> None:
        # Job events are dispatched after the executor releases the running
        # instance, so the next one-shot job cannot hit max_instances.
        if event.job_id != JOB_ID or not self.is_running:
            return
        self._arm(datetime.now(timezone.utc) + timedelta(seconds=self.interval_seconds))

    async def start(self) -> None:
        """Start probing; the first cycle runs immediately."""
        if self.is_running:
            raise RuntimeError("Scheduler is already running")

        self.scheduler.start()
        self.is_running = True
        logger.info(
            "Probe scheduler started",
            extra={"context": {"interval_seconds": self.interval_seconds}},
        )
        self._arm(datetime.now(timezone.utc))

    async def stop(self) -> None:
        """Stop probing. A cycle already in flight finishes but is not re-armed."""
        if not self.is_running:
            return

        self.is_running = False
        self.scheduler.shutdown(wait=False)
        logger.info("Probe scheduler stopped", extra={"context": {"cycles_run": self.cycles_run}})

    def next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(JOB_ID) if self.is_running else None
        return job.next_run_time if job else None

    def get_status(self) -> Dict[str, Any]:
        next_run = self.next_run_time()
        return {
            "is_running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "cycles_run": self.cycles_run,
            "consecutive_failures": self.consecutive_failures,
            "cycle_in_flight": self._cycle_in_flight,
            "last_cycle_end": self.last_cycle_end.isoformat() if self.last_cycle_end else None,
            "next_run": next_run.isoformat() if next_run else None,
            "last_result": self.last_result.to_dict() if self.last_result else None,
        }


__all__ = ["ProbeScheduler", "JOB_ID"]
