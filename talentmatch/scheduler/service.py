"""Scheduler service triggering the daily and weekly alert digests."""

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from talentmatch.config.models import AlertsConfig
from talentmatch.logging import get_logger

logger = get_logger(__name__, component="scheduler")

DAILY_JOB_ID = "daily-digest"
WEEKLY_JOB_ID = "weekly-digest"
MISFIRE_GRACE_SECONDS = 3600


class SchedulerService:
    """
    Wraps APScheduler to trigger periodic alert digests on a cron schedule.

    Uses BackgroundScheduler to run jobs in a separate thread while
    allowing the main thread to handle signals and coordinate shutdown.
    Times are UTC.
    """

    def __init__(
        self,
        digest_callable: Callable[[str], Any],
        alerts_config: Optional[AlertsConfig] = None,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the scheduler service.

        Args:
            digest_callable: Called with "daily" or "weekly" on each trigger
                (e.g., dispatcher.dispatch_periodic)
            alerts_config: Digest hours and weekday
            shutdown_event: Optional event to set on shutdown for coordination
        """
        self.digest_callable = digest_callable
        self.alerts_config = alerts_config or AlertsConfig()
        self.shutdown_event = shutdown_event

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,  # Prevent overlapping runs of the same digest
                "coalesce": True,  # Missed triggers collapse into one run
                "misfire_grace_time": MISFIRE_GRACE_SECONDS,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Register the digest jobs and start the scheduler."""
        if self.scheduler.running:
            logger.warning(
                "Scheduler already running, ignoring start",
                extra={"event": "scheduler.already_running"},
            )
            return

        config = self.alerts_config

        self.scheduler.add_job(
            func=self._run_digest,
            trigger=CronTrigger(hour=config.daily_digest_hour, minute=0, timezone=timezone.utc),
            args=["daily"],
            id=DAILY_JOB_ID,
            name="Daily alert digest",
            replace_existing=True,
        )
        self.scheduler.add_job(
            func=self._run_digest,
            trigger=CronTrigger(
                day_of_week=config.weekly_digest_day,
                hour=config.weekly_digest_hour,
                minute=0,
                timezone=timezone.utc,
            ),
            args=["weekly"],
            id=WEEKLY_JOB_ID,
            name="Weekly alert digest",
            replace_existing=True,
        )

        self.scheduler.start()

        next_runs = self.get_next_run_times()
        logger.info(
            "Scheduler started",
            extra={
                "event": "scheduler.started",
                "daily_next_run": next_runs.get("daily"),
                "weekly_next_run": next_runs.get("weekly"),
            },
        )

    def _run_digest(self, frequency: str) -> None:
        logger.info(
            f"Running {frequency} digest",
            extra={"event": "scheduler.digest.triggered", "frequency": frequency},
        )
        try:
            self.digest_callable(frequency)
        except Exception as e:
            # The next trigger retries; the job must stay scheduled
            logger.error(
                f"{frequency.capitalize()} digest failed: {e}",
                extra={
                    "event": "scheduler.digest.failed",
                    "frequency": frequency,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )

    def shutdown(self, wait: bool = False) -> None:
        """
        Shutdown the scheduler gracefully.

        Args:
            wait: If True, wait for running jobs to complete before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self, frequency: str) -> None:
        """Run a digest synchronously in the current thread."""
        logger.info(
            "Triggering immediate digest run",
            extra={"event": "scheduler.trigger_now", "frequency": frequency},
        )
        self.digest_callable(frequency)

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_times(self) -> Dict[str, Optional[datetime]]:
        """Next run time of each digest job (None when not scheduled)."""
        next_runs = {}
        for frequency, job_id in (("daily", DAILY_JOB_ID), ("weekly", WEEKLY_JOB_ID)):
            job = self.scheduler.get_job(job_id)
            next_runs[frequency] = job.next_run_time if job else None
        return next_runs
