"""
Project Matches API Router
Read access to a project's current vendor matches
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import structlog

from app.database import get_db
from app.models import Project
from app.services.match_repository import MatchRepository

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/projects", tags=["matches"])


@router.get("/{project_id}/matches")
def list_project_matches(project_id: int, db: Session = Depends(get_db)):
    """
    List all matches of a project

    Raises:
        404: Project not found
    """
    if db is None:
        raise HTTPException(status_code=503, detail="Database not configured")

    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    matches = MatchRepository(db).list_by_project(project_id)
    logger.info("project_matches_listed", project_id=project_id, count=len(matches))

    return {
        "project_id": project_id,
        "total": len(matches),
        "matches": [m.to_dict() for m in matches]
    }
