"""
Scheduler API Router
Manual triggers for the scheduled jobs and job state visibility
"""

from fastapi import APIRouter, Depends, HTTPException
import structlog

from app.services.matching_engine import NotFoundError
from app.services.scheduler_service import JobStatus, get_scheduler_service

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/scheduler", tags=["scheduler"])

# Handlers are plain def: jobs block on the database, SMTP and pacing sleeps,
# so FastAPI runs them in its threadpool instead of on the event loop.


def require_scheduler_service():
    """Dependency: the process-wide SchedulerService or 503"""
    service = get_scheduler_service()
    if service is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return service


def _raise_if_failed(run):
    if run.status == JobStatus.FAILED:
        logger.error("manual_job_failed", job_id=run.job_id, error=run.error)
        raise HTTPException(
            status_code=500,
            detail={"message": f"Job {run.job_id} failed", "run": run.to_dict()}
        )


@router.post("/refresh-matches")
def refresh_matches(service=Depends(require_scheduler_service)):
    """
    Manually trigger match refresh for all active projects

    Same logic as the daily job. Partial failures are reported in the
    acknowledgment; a run that could not fetch its batch returns 500.
    """
    run = service.trigger_match_refresh()
    _raise_if_failed(run)

    return {
        "message": "Match refresh triggered successfully",
        "status": run.status.value,
        "total": run.total,
        "succeeded": run.succeeded,
        "failed": run.failed
    }


@router.post("/refresh-matches/{project_id}")
def refresh_matches_for_project(project_id: int, service=Depends(require_scheduler_service)):
    """
    Manually trigger match refresh for a specific project

    Works for any project status.

    Raises:
        404: Project or its client not found
    """
    try:
        run = service.trigger_match_refresh(project_id)
    except NotFoundError as e:
        logger.warning("manual_refresh_not_found", project_id=project_id, error=str(e))
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "message": f"Match refresh triggered successfully for project {project_id}",
        "project_id": project_id,
        "match_count": len(run.details.get("matches", []))
    }


@router.post("/monitor-sla")
def monitor_sla(service=Depends(require_scheduler_service)):
    """Manually trigger SLA monitoring"""
    run = service.trigger_sla_monitoring()
    _raise_if_failed(run)

    return {
        "message": "SLA monitoring triggered successfully",
        "expired_vendors": run.total
    }


@router.post("/weekly-statistics")
def weekly_statistics(service=Depends(require_scheduler_service)):
    """Manually generate and send the weekly statistics report"""
    run = service.trigger_weekly_statistics()
    _raise_if_failed(run)

    return {
        "message": "Weekly statistics generated successfully",
        "stats": run.details.get("stats")
    }


@router.get("/jobs")
def list_job_states(service=Depends(require_scheduler_service)):
    """Current state and last run of every scheduled job"""
    return {"jobs": service.job_states()}
