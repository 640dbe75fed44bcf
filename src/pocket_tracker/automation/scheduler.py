"""
Single-threaded periodic driver for automation sweeps.

Jobs run in registration order, each to completion, on the caller's
thread. A job is never reentered: the next tick only starts after the
previous one returns.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from pocket_tracker.automation.clock import Clock

logger = logging.getLogger(__name__)


@dataclass
class Job:
    name: str
    interval: timedelta
    action: Callable[[], object]
    next_run: Optional[datetime] = None # None runs on the first tick

    def is_due(self, now: datetime) -> bool:
        return self.next_run is None or now >= self.next_run


class AutomationScheduler:
    """
    Usage:
        scheduler = AutomationScheduler(clock)
        scheduler.every(timedelta(hours=1), "recurrence", service.sweep_recurring)
        scheduler.run_forever()
    """

    def __init__(self, clock: Clock, sleep: Callable[[float], None] = time.sleep):
        self.clock = clock
        self.sleep = sleep
        self.jobs: List[Job] = []

    def every(self, interval: timedelta, name: str, action: Callable[[], object]) -> Job:
        """Register `action` to run every `interval`, starting on the next tick"""
        job = Job(name=name, interval=interval, action=action)
        self.jobs.append(job)
        return job

    def run_pending(self) -> List[str]:
        """
        Run every job that is due.

        Returns:
            Names of the jobs that ran
        """
        ran = []
        for job in self.jobs:
            now = self.clock.now()
            if not job.is_due(now):
                continue

            logger.debug("Running %s sweep", job.name)
            job.next_run = now + job.interval
            try:
                job.action()
            except Exception:
                # A broken sweep must not stop the others
                logger.exception("%s sweep failed", job.name)
                continue
            ran.append(job.name)

        return ran

    def seconds_until_next(self) -> float:
        now = self.clock.now()
        waits = [
            max(0.0, (job.next_run - now).total_seconds()) if job.next_run else 0.0
            for job in self.jobs
        ]
        return min(waits, default=0.0)

    def run_forever(self, max_ticks: Optional[int] = None) -> None:
        """Tick until interrupted, or `max_ticks` ticks have run"""
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            self.run_pending()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            self.sleep(self.seconds_until_next())
