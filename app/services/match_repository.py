"""
Match Repository
Insert-or-update storage for (project, vendor) scores
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Tuple

from sqlalchemy import and_, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, joinedload
import structlog

from app.models import Match, Vendor

logger = structlog.get_logger(__name__)

CONFLICT_COLUMNS = ["project_id", "vendor_id"]


@dataclass
class UpsertResult:
    is_new: bool
    match: Match


class MatchRepository:
    """
    Match persistence keyed on uq_matches_project_vendor. Supports
    PostgreSQL and SQLite.

    The uniqueness of (project_id, vendor_id) is guaranteed by the database
    constraint plus a single INSERT ... ON CONFLICT statement. is_new comes
    from an existence check issued just before that statement, so two
    concurrent writers for the same pair can both report is_new=True while
    only one row is ever stored.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock

    def exists(self, project_id: int, vendor_id: int) -> bool:
        return self.db.query(Match.id).filter(
            Match.project_id == project_id,
            Match.vendor_id == vendor_id
        ).first() is not None

    def upsert(self, project_id: int, vendor_id: int, score: Decimal) -> UpsertResult:
        """
        Insert a match or refresh its score.

        On conflict only score and updated_at change; created_at keeps its
        first-insert value.

        Returns:
            UpsertResult with is_new from the pre-check and the stored row
        """
        existed = self.exists(project_id, vendor_id)
        now = self.clock()

        stmt = self._upsert_statement(project_id, vendor_id, score, now)
        self.db.execute(stmt)
        self.db.commit()

        match = self.db.query(Match).filter(
            Match.project_id == project_id,
            Match.vendor_id == vendor_id
        ).one()

        logger.debug(
            "match_upserted",
            project_id=project_id,
            vendor_id=vendor_id,
            score=str(score),
            is_new=not existed
        )
        return UpsertResult(is_new=not existed, match=match)

    def _upsert_statement(self, project_id: int, vendor_id: int, score: Decimal, now: datetime):
        values = dict(
            project_id=project_id,
            vendor_id=vendor_id,
            score=score,
            created_at=now,
            updated_at=now,
        )
        dialect = self.db.get_bind().dialect.name

        if dialect == "postgresql":
            stmt = pg_insert(Match).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=CONFLICT_COLUMNS,
                set_={"score": stmt.excluded.score, "updated_at": stmt.excluded.updated_at}
            )
        if dialect == "sqlite":
            stmt = sqlite_insert(Match).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=CONFLICT_COLUMNS,
                set_={"score": stmt.excluded.score, "updated_at": stmt.excluded.updated_at}
            )

        raise ValueError(f"Atomic match upsert requires PostgreSQL or SQLite, got dialect '{dialect}'")

    def list_by_project(self, project_id: int) -> List[Match]:
        return self.db.query(Match).filter(
            Match.project_id == project_id
        ).order_by(Match.vendor_id).all()

    def latest_match_per_vendor(self) -> List[Tuple[Vendor, Match]]:
        """
        Most recent match (created_at desc, id desc) for every vendor with matches.
        """
        latest = (
            self.db.query(
                Match.vendor_id.label("vendor_id"),
                func.max(Match.created_at).label("latest_created_at")
            )
            .group_by(Match.vendor_id)
            .subquery()
        )

        rows = (
            self.db.query(Vendor, Match)
            .join(Match, Match.vendor_id == Vendor.id)
            .join(latest, and_(
                latest.c.vendor_id == Match.vendor_id,
                latest.c.latest_created_at == Match.created_at
            ))
            .order_by(Vendor.id, Match.id.desc())
            .all()
        )

        # Same-timestamp ties: keep the highest match id
        result = []
        seen = set()
        for vendor, match in rows:
            if vendor.id in seen:
                continue
            seen.add(vendor.id)
            result.append((vendor, match))
        return result

    def created_since(self, window_start: datetime) -> List[Match]:
        """Matches with created_at >= window_start, vendors eagerly loaded."""
        return (
            self.db.query(Match)
            .options(joinedload(Match.vendor))
            .filter(Match.created_at >= window_start)
            .order_by(Match.id)
            .all()
        )


__all__ = ["MatchRepository", "UpsertResult"]
