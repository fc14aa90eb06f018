"""APScheduler wrapper exposing the radar's two background schedules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..logging_conf import configure_logging

POLL_JOB_ID = "radar::poll"
PURGE_JOB_ID = "radar::purge"


class APSchedulerAdapter:
    """Manage the poll (fixed-delay) and purge (fixed-rate) jobs."""

    def __init__(self) -> None:
        self.scheduler = BackgroundScheduler(timezone=timezone.utc)
        self.logger = configure_logging().bind(component="scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self) -> None:
        if self.started:
            for job_id in (POLL_JOB_ID, PURGE_JOB_ID):
                self.remove_job(job_id)
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_poll(self, callback: Callable[[], object], delay_seconds: float) -> None:
        """Arm a one-shot poll; the cycle re-arms it when it finishes."""

        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(delay_seconds, 0.0))
        self.scheduler.add_job(
            callback,
            trigger=DateTrigger(run_date=run_date),
            id=POLL_JOB_ID,
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=None,
        )
        self.logger.debug("poll_scheduled", run_date=run_date.isoformat())

    def schedule_purge(self, callback: Callable[[], object], interval_seconds: float) -> None:
        self.scheduler.add_job(
            callback,
            trigger=IntervalTrigger(seconds=float(interval_seconds)),
            id=PURGE_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.logger.info("purge_scheduled", interval_seconds=interval_seconds)

    def remove_job(self, job_id: str) -> None:
        try:
            self.scheduler.remove_job(job_id)
        except Exception:  # noqa: BLE001
            self.logger.debug("job_remove_skipped", job_id=job_id)

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run_time": getattr(job, "next_run_time", None),
                    "trigger": str(job.trigger),
                }
            )
        return jobs


__all__ = ["APSchedulerAdapter", "POLL_JOB_ID", "PURGE_JOB_ID"]
