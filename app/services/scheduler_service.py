"""
Scheduler Service

Job logic behind the calendar triggers and the manual trigger endpoints:
- Daily match refresh for all active projects
- SLA expiration monitoring
- Weekly match statistics report

Each job run moves idle -> running -> (succeeded | partially_failed | failed)
-> idle. Per-project failures inside the refresh batch are caught, logged
and counted; only a failure to enumerate the batch or to compute an
aggregate fails the whole run. Report delivery problems never fail a run.
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import structlog

from app.middleware.correlation_id import job_correlation_id
from app.models import Project, ProjectStatus
from app.services.match_repository import MatchRepository
from app.services.matching_engine import MatchingEngine
from app.services.report_templates import (
    REFRESH_SUMMARY_SUBJECT,
    SLA_ALERT_SUBJECT,
    WEEKLY_REPORT_SUBJECT,
    render_refresh_summary,
    render_sla_alert,
    render_weekly_report,
)
from app.services.sla_monitor import SlaMonitor
from app.services.statistics import StatisticsAggregator

logger = structlog.get_logger(__name__)

REFRESH_JOB_ID = "refresh-matches-daily"
PROJECT_REFRESH_JOB_ID = "refresh-matches-project"
SLA_JOB_ID = "monitor-sla-expiration"
WEEKLY_STATS_JOB_ID = "weekly-match-statistics"

TRACKED_JOBS = (REFRESH_JOB_ID, SLA_JOB_ID, WEEKLY_STATS_JOB_ID)


class JobStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    PARTIALLY_FAILED = "partially_failed"
    FAILED = "failed"


@dataclass
class JobRun:
    """Outcome of one job execution."""
    job_id: str
    trigger: str  # scheduled, manual
    started_at: datetime
    status: JobStatus = JobStatus.RUNNING
    finished_at: Optional[datetime] = None
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    correlation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "trigger": self.trigger,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": self.failures,
            "error": self.error,
            "details": self.details,
            "correlation_id": self.correlation_id,
        }


def batch_status(total: int, failed: int) -> JobStatus:
    """
    Outcome of a batch that was fetched successfully.

    Per-project failures only ever show up as counters. A batch where every
    project failed is still succeeded; failed is reserved for runs that
    could not enumerate the batch at all.
    """
    if 0 < failed < total:
        return JobStatus.PARTIALLY_FAILED
    return JobStatus.SUCCEEDED


class SchedulerService:
    """
    Job runner shared by APScheduler and the manual trigger router.

    Usage:
        service = SchedulerService(
            session_factory=SessionLocal,
            notifier=email_notifier,
            admin_email=settings.admin_email
        )
        run = service.refresh_matches_daily()

    Every job opens its own sessions from session_factory. Within the
    refresh job each project gets a fresh session so one project's failure
    cannot poison the next one's transaction.
    """

    def __init__(
        self,
        session_factory,
        notifier,
        admin_email: str,
        pacing_seconds: float = 1.0,
        stats_window_days: int = 7,
        top_vendors_limit: int = 10,
        clock: Callable[[], datetime] = datetime.utcnow,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.session_factory = session_factory
        self.notifier = notifier
        self.admin_email = admin_email
        self.pacing_seconds = pacing_seconds
        self.stats_window_days = stats_window_days
        self.top_vendors_limit = top_vendors_limit
        self.clock = clock
        self.sleep = sleep

        # Guards the bookkeeping below, not the jobs themselves
        self._lock = threading.Lock()
        self._running: Dict[str, int] = {job_id: 0 for job_id in TRACKED_JOBS}
        self._last_runs: Dict[str, JobRun] = {}

    # ------------------------------------------------------------------
    # Job state
    # ------------------------------------------------------------------

    def job_state(self, job_id: str) -> JobStatus:
        with self._lock:
            return JobStatus.RUNNING if self._running.get(job_id) else JobStatus.IDLE

    def last_run(self, job_id: str) -> Optional[JobRun]:
        with self._lock:
            return self._last_runs.get(job_id)

    def job_states(self) -> Dict[str, Dict[str, Any]]:
        states = {}
        for job_id in TRACKED_JOBS:
            last = self.last_run(job_id)
            states[job_id] = {
                "state": self.job_state(job_id).value,
                "last_run": last.to_dict() if last else None,
            }
        return states

    def _run_job(self, job_id: str, trigger: str, body: Callable[[JobRun, Any], JobStatus]) -> JobRun:
        """
        Run one job body with state tracking and job-level failure handling.

        body(run, log) returns the final status; anything it raises marks
        the run failed and is logged, never re-raised.
        """
        with job_correlation_id(job_id) as cid:
            run = JobRun(job_id=job_id, trigger=trigger, started_at=self.clock(), correlation_id=cid)
            log = logger.bind(job_id=job_id, trigger=trigger, run_id=cid)

            with self._lock:
                self._running[job_id] = self._running.get(job_id, 0) + 1
            log.info("job_started")

            try:
                run.status = body(run, log)
            except Exception as e:
                run.status = JobStatus.FAILED
                run.error = str(e)
                log.error("job_failed", error=str(e), exc_info=True)
            finally:
                run.finished_at = self.clock()
                with self._lock:
                    self._running[job_id] -= 1
                    self._last_runs[job_id] = run

            log.info(
                "job_finished",
                status=run.status.value,
                total=run.total,
                succeeded=run.succeeded,
                failed=run.failed
            )
            return run

    # ------------------------------------------------------------------
    # Scheduled jobs
    # ------------------------------------------------------------------

    def refresh_matches_daily(self, trigger: str = "scheduled") -> JobRun:
        """
        Rebuild matches for every active project, one at a time.

        Projects are processed in id order with a pacing delay between
        them. A failing project is counted and skipped. When any project
        failed, a summary goes to the admin address.
        """
        return self._run_job(REFRESH_JOB_ID, trigger, self._refresh_batch)

    def monitor_sla_expiration(self, trigger: str = "scheduled") -> JobRun:
        """
        Check vendor SLAs as of now; one consolidated alert when any are overdue.
        """
        return self._run_job(SLA_JOB_ID, trigger, self._check_sla)

    def generate_weekly_statistics(self, trigger: str = "scheduled") -> JobRun:
        """
        Aggregate the trailing window and always send the report.
        """
        return self._run_job(WEEKLY_STATS_JOB_ID, trigger, self._weekly_statistics)

    # ------------------------------------------------------------------
    # Manual triggers
    # ------------------------------------------------------------------

    def trigger_match_refresh(self, project_id: Optional[int] = None) -> JobRun:
        """
        Manual match refresh.

        Without project_id this is the daily job. With project_id exactly
        that project is rebuilt regardless of its status, and errors such
        as NotFoundError propagate to the caller.
        """
        if project_id is None:
            logger.info("manual_match_refresh_triggered", scope="all_active_projects")
            return self.refresh_matches_daily(trigger="manual")

        logger.info("manual_match_refresh_triggered", scope="project", project_id=project_id)
        run = JobRun(
            job_id=PROJECT_REFRESH_JOB_ID,
            trigger="manual",
            started_at=self.clock(),
            total=1
        )
        matches = self._rebuild_project(project_id)
        run.succeeded = 1
        run.status = JobStatus.SUCCEEDED
        run.finished_at = self.clock()
        run.details = {"project_id": project_id, "matches": matches}
        logger.info("manual_match_refresh_completed", project_id=project_id, matches=len(matches))
        return run

    def trigger_sla_monitoring(self) -> JobRun:
        logger.info("manual_sla_monitoring_triggered")
        return self.monitor_sla_expiration(trigger="manual")

    def trigger_weekly_statistics(self) -> JobRun:
        logger.info("manual_weekly_statistics_triggered")
        return self.generate_weekly_statistics(trigger="manual")

    # ------------------------------------------------------------------
    # Job bodies
    # ------------------------------------------------------------------

    def _refresh_batch(self, run: JobRun, log) -> JobStatus:
        project_ids = self._fetch_active_project_ids()
        run.total = len(project_ids)
        log.info("active_projects_found", count=run.total)

        for index, project_id in enumerate(project_ids):
            try:
                log.info("project_refresh_started", project_id=project_id)
                self._rebuild_project(project_id)
                run.succeeded += 1
                log.info("project_refresh_succeeded", project_id=project_id)
            except Exception as e:
                run.failed += 1
                run.failures.append({
                    "project_id": project_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                })
                log.error(
                    "project_refresh_failed",
                    project_id=project_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True
                )

            if index < len(project_ids) - 1:
                self.sleep(self.pacing_seconds)

        log.info(
            "match_refresh_completed",
            total=run.total,
            succeeded=run.succeeded,
            failed=run.failed
        )

        if run.failed > 0:
            run.details["report_message_id"] = self._send_report(
                REFRESH_SUMMARY_SUBJECT, render_refresh_summary(run), log
            )

        return batch_status(run.total, run.failed)

    def _check_sla(self, run: JobRun, log) -> JobStatus:
        as_of = self.clock()
        db = self.session_factory()
        try:
            breaches = SlaMonitor(MatchRepository(db)).find_expired(as_of)
            run.total = len(breaches)
            run.details["as_of"] = as_of.isoformat()
            run.details["expired"] = [b.to_dict() for b in breaches]

            if breaches:
                log.warning("sla_expired_vendors_found", count=len(breaches))
                run.details["report_message_id"] = self._send_report(
                    SLA_ALERT_SUBJECT, render_sla_alert(breaches), log
                )
            else:
                log.info("sla_all_vendors_compliant")
        finally:
            db.close()

        return JobStatus.SUCCEEDED

    def _weekly_statistics(self, run: JobRun, log) -> JobStatus:
        window_start = self.clock() - timedelta(days=self.stats_window_days)
        db = self.session_factory()
        try:
            aggregator = StatisticsAggregator(MatchRepository(db), top_vendors_limit=self.top_vendors_limit)
            stats = aggregator.weekly_stats(window_start)
            run.total = stats.total_matches
            run.details["window_start"] = window_start.isoformat()
            run.details["stats"] = stats.to_dict()

            run.details["report_message_id"] = self._send_report(
                WEEKLY_REPORT_SUBJECT, render_weekly_report(stats, window_start), log
            )
        finally:
            db.close()

        return JobStatus.SUCCEEDED

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch_active_project_ids(self) -> List[int]:
        db = self.session_factory()
        try:
            rows = db.query(Project.id).filter(
                Project.status == ProjectStatus.ACTIVE
            ).order_by(Project.id).all()
            return [row[0] for row in rows]
        finally:
            db.close()

    def _rebuild_project(self, project_id: int) -> List[Dict[str, Any]]:
        db = self.session_factory()
        try:
            engine = MatchingEngine(db, self.notifier, clock=self.clock)
            matches = engine.rebuild_matches(project_id)
            return [m.to_dict() for m in matches]
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _send_report(self, subject: str, html_body: str, log) -> Optional[str]:
        try:
            message_id = self.notifier.send_report(self.admin_email, subject, html_body)
            log.info("report_delivered", subject=subject, to=self.admin_email)
            return message_id
        except Exception as e:
            log.error("report_delivery_failed", subject=subject, to=self.admin_email, error=str(e))
            return None


_scheduler_service: Optional[SchedulerService] = None


def get_scheduler_service() -> Optional[SchedulerService]:
    """
    Process-wide SchedulerService, built on first use after init_db().

    Returns None while the database is not configured.
    """
    global _scheduler_service

    if _scheduler_service is None:
        from app.config import settings
        from app.database import SessionLocal
        from app.services.email_notifier import email_notifier

        if SessionLocal is None:
            return None

        _scheduler_service = SchedulerService(
            session_factory=SessionLocal,
            notifier=email_notifier,
            admin_email=settings.admin_email,
            pacing_seconds=settings.refresh_pacing_seconds,
            stats_window_days=settings.stats_window_days,
            top_vendors_limit=settings.top_vendors_limit
        )

    return _scheduler_service


__all__ = [
    "SchedulerService",
    "JobRun",
    "JobStatus",
    "batch_status",
    "get_scheduler_service",
    "REFRESH_JOB_ID",
    "SLA_JOB_ID",
    "WEEKLY_STATS_JOB_ID",
]
