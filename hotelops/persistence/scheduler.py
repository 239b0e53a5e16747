"""
HotelOps Persistence - Write Scheduler

Single-slot pending-task holder on top of an APScheduler BackgroundScheduler.
Scheduling under a job id that already has a pending job cancels it and
schedules the new one in its place.
"""
import datetime
import logging
import threading
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.jobstores.base import JobLookupError

logger = logging.getLogger(__name__)


class WriteScheduler:

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler(
            timezone=datetime.timezone.utc,
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 30},
        )
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self):
        if self._scheduler.running:
            return
        self._scheduler.start()
        logger.info("[Persist] Write scheduler started")

    def shutdown(self, wait: bool = True):
        if not self._scheduler.running:
            return
        self._scheduler.shutdown(wait=wait)
        logger.info("[Persist] Write scheduler stopped")

    def schedule(
        self,
        job_id: str,
        func: Callable,
        delay_seconds: float,
        args: tuple = (),
        max_instances: int = 1,
    ):
        """
        Run ``func`` after ``delay_seconds``, replacing any pending job with this id.

        ``max_instances`` limits how many runs under this id may overlap; a
        run that would exceed it is skipped by APScheduler.
        """
        run_date = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(seconds=delay_seconds)
        with self._lock:
            self._scheduler.add_job(
                func,
                "date",
                run_date=run_date,
                args=args,
                id=job_id,
                replace_existing=True,
                max_instances=max_instances,
            )

    def cancel(self, job_id: str) -> bool:
        """Drop a pending job. Returns False if nothing was pending."""
        with self._lock:
            try:
                self._scheduler.remove_job(job_id)
                return True
            except JobLookupError:
                return False

    def pending(self, job_id: str) -> bool:
        return self._scheduler.get_job(job_id) is not None

    def run_now(self, job_id: str) -> bool:
        """Take a pending job out of the schedule and run it on the calling thread."""
        with self._lock:
            job = self._scheduler.get_job(job_id)
            if job is None:
                return False
            try:
                self._scheduler.remove_job(job_id)
            except JobLookupError:
                # Already fired between lookup and removal
                return False
        job.func(*job.args, **job.kwargs)
        return True
