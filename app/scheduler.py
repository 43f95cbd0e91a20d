"""
APScheduler Background Jobs

Calendar triggers for match refresh, SLA monitoring and weekly statistics.
The registry below is plain data; only start_scheduler() turns it into
APScheduler CronTriggers. Jobs run via BackgroundScheduler in the FastAPI
process, each in its own worker thread.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import settings
from app.services.scheduler_service import (
    REFRESH_JOB_ID,
    SLA_JOB_ID,
    WEEKLY_STATS_JOB_ID,
    SchedulerService,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TriggerSpec:
    """Fixed calendar time; day_of_week None means every day."""
    hour: int
    minute: int = 0
    day_of_week: Optional[str] = None

    def describe(self) -> str:
        when = f"{self.hour:02d}:{self.minute:02d}"
        return f"{self.day_of_week}_{when}" if self.day_of_week else f"daily_{when}"

    def to_cron(self, timezone: str) -> CronTrigger:
        if self.day_of_week:
            return CronTrigger(day_of_week=self.day_of_week, hour=self.hour, minute=self.minute, timezone=timezone)
        return CronTrigger(hour=self.hour, minute=self.minute, timezone=timezone)


@dataclass(frozen=True)
class ScheduledJob:
    job_id: str
    name: str
    trigger: TriggerSpec
    func: Callable


def build_job_registry(service: SchedulerService) -> List[ScheduledJob]:
    """
    (trigger, job) pairs for the three scheduled jobs.

    Hours come from settings; the SLA check runs after the refresh.
    """
    return [
        ScheduledJob(
            job_id=REFRESH_JOB_ID,
            name="Daily Match Refresh for Active Projects",
            trigger=TriggerSpec(hour=settings.match_refresh_hour),
            func=service.refresh_matches_daily,
        ),
        ScheduledJob(
            job_id=SLA_JOB_ID,
            name="Daily Vendor SLA Expiration Monitoring",
            trigger=TriggerSpec(hour=settings.sla_check_hour),
            func=service.monitor_sla_expiration,
        ),
        ScheduledJob(
            job_id=WEEKLY_STATS_JOB_ID,
            name="Weekly Match Statistics Report",
            trigger=TriggerSpec(hour=settings.weekly_stats_hour, day_of_week=settings.weekly_stats_day_of_week),
            func=service.generate_weekly_statistics,
        ),
    ]


def start_scheduler(
    service: Optional[SchedulerService],
    environment: str = "production"
) -> BackgroundScheduler:
    """
    Start background scheduler with all jobs.

    Args:
        service: SchedulerService running the jobs (None when the database is not configured)
        environment: Current environment (skip scheduler in testing)

    Returns:
        BackgroundScheduler instance
    """
    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if environment == "testing":
        logger.info("scheduler_skipped", reason="testing_environment")
        return scheduler

    if service is None:
        logger.warning("scheduler_skipped", reason="database_not_configured")
        return scheduler

    registry = build_job_registry(service)
    for job in registry:
        scheduler.add_job(
            job.func,
            trigger=job.trigger.to_cron(settings.scheduler_timezone),
            id=job.job_id,
            name=job.name,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        logger.info("job_registered", job=job.job_id, schedule=job.trigger.describe())

    scheduler.start()
    logger.info("scheduler_started", jobs=[job.job_id for job in registry], timezone=settings.scheduler_timezone)

    return scheduler


def stop_scheduler(scheduler: BackgroundScheduler):
    """
    Stop background scheduler gracefully.

    Args:
        scheduler: BackgroundScheduler instance to stop
    """
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")


__all__ = [
    "TriggerSpec",
    "ScheduledJob",
    "build_job_registry",
    "start_scheduler",
    "stop_scheduler",
]
