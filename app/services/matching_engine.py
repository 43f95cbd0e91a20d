"""
Matching Engine Service
Rebuilds vendor matches for one project and notifies clients about new ones
"""

from datetime import datetime
from typing import Callable, List, Optional
from sqlalchemy.orm import Session
import structlog

from app.models import Client, Match, Project
from app.services.match_repository import MatchRepository
from app.services.scoring import ScoringQuery

logger = structlog.get_logger(__name__)


class NotFoundError(Exception):
    """Raised when an entity required for a rebuild does not exist."""


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: int):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class ClientNotFoundError(NotFoundError):
    def __init__(self, project_id: int, client_id: int):
        self.project_id = project_id
        self.client_id = client_id
        super().__init__(f"Client {client_id} not found for project {project_id}")


class MatchingEngine:
    """
    Orchestrates ScoringQuery -> MatchRepository -> notifier for one project.

    Usage:
        engine = MatchingEngine(db, notifier=email_notifier)
        matches = engine.rebuild_matches(project_id=42)

    Collaborators are injected so tests can pass fakes. The notifier only
    needs a send_match_notification(to_address, project_id, vendor_id, score)
    method that raises on failure.
    """

    def __init__(
        self,
        db: Session,
        notifier,
        scoring: Optional[ScoringQuery] = None,
        repository: Optional[MatchRepository] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.db = db
        self.notifier = notifier
        self.scoring = scoring or ScoringQuery(db)
        self.repository = repository or MatchRepository(db, clock=clock)

    def rebuild_matches(self, project_id: int) -> List[Match]:
        """
        Recompute and persist all matches of a project.

        Candidates are processed in the order the scoring query returns
        them. A notification goes out only for pairs that had no row before
        this call; a failed notification is logged and the loop continues.
        Existing matches that no longer qualify are left untouched.

        Args:
            project_id: Project to rebuild

        Returns:
            All current matches of the project

        Raises:
            ProjectNotFoundError: project does not exist
            ClientNotFoundError: project's client does not exist
        """
        log = logger.bind(project_id=project_id)

        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise ProjectNotFoundError(project_id)

        client = self.db.query(Client).filter(Client.id == project.client_id).first()
        if not client:
            raise ClientNotFoundError(project_id, project.client_id)

        candidates = self.scoring.compute_candidates(project)
        log.info("rebuild_started", candidates=len(candidates), country=project.country)

        new_count = 0
        for candidate in candidates:
            result = self.repository.upsert(project_id, candidate.vendor_id, candidate.score)

            if not result.is_new:
                log.info(
                    "match_refreshed",
                    vendor_id=candidate.vendor_id,
                    score=str(candidate.score)
                )
                continue

            new_count += 1
            log.info(
                "new_match_found",
                vendor_id=candidate.vendor_id,
                score=str(candidate.score),
                notify=client.contact_email
            )
            try:
                message_id = self.notifier.send_match_notification(
                    client.contact_email,
                    project_id,
                    candidate.vendor_id,
                    candidate.score
                )
                log.info("match_notification_delivered", vendor_id=candidate.vendor_id, message_id=message_id)
            except Exception as e:
                # Delivery problems never block the remaining candidates
                log.error(
                    "match_notification_failed",
                    vendor_id=candidate.vendor_id,
                    to=client.contact_email,
                    error=str(e),
                    error_type=type(e).__name__
                )

        matches = self.repository.list_by_project(project_id)
        log.info("rebuild_completed", new_matches=new_count, total_matches=len(matches))
        return matches


__all__ = [
    "MatchingEngine",
    "NotFoundError",
    "ProjectNotFoundError",
    "ClientNotFoundError",
]
