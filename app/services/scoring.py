"""
Vendor Scoring Query

Ranks vendors for a project:
    score = overlap_count * 2 + rating + sla_bonus

overlap_count is the number of the project's required services a vendor
offers; only vendors covering the project's country are considered.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session
import structlog

from app.models import Project, Vendor, VendorCountry, project_services, vendor_services

logger = structlog.get_logger(__name__)

# SLA bonus tiers: (max hours inclusive, bonus)
SLA_BONUS_TIERS = ((24, 2), (72, 1))


@dataclass
class VendorCandidate:
    """One scored vendor for a project."""
    vendor_id: int
    overlap_count: int
    rating: Decimal
    sla_hours: int
    score: Decimal


def sla_bonus(sla_hours: int) -> int:
    """
    Bonus for fast-responding vendors.

    Returns 2 for <= 24h, 1 for <= 72h, 0 otherwise.
    """
    for max_hours, bonus in SLA_BONUS_TIERS:
        if sla_hours <= max_hours:
            return bonus
    return 0


def calculate_score(overlap_count: int, rating, sla_hours: int) -> Decimal:
    """
    Exact score for one vendor.

    Args:
        overlap_count: Distinct required services the vendor offers
        rating: Vendor rating (0-5)
        sla_hours: Vendor response SLA in hours

    Returns:
        Decimal score, e.g. calculate_score(2, Decimal("4.2"), 24) == Decimal("10.2")
    """
    rating = rating if isinstance(rating, Decimal) else Decimal(str(rating or 0))
    return Decimal(overlap_count * 2) + rating + Decimal(sla_bonus(sla_hours))


class ScoringQuery:
    """
    Read-only candidate computation against the relational store.

    Usage:
        candidates = ScoringQuery(db).compute_candidates(project)
    """

    def __init__(self, db: Session):
        self.db = db

    def compute_candidates(self, project: Project) -> List[VendorCandidate]:
        """
        Vendors covering project.country that offer at least one required service.

        Rows come back in vendor id order so repeated runs over identical
        data yield identical lists. No ranking is implied.
        """
        overlap = func.count(distinct(vendor_services.c.service_id)).label("overlap_count")

        rows = (
            self.db.query(
                Vendor.id,
                overlap,
                Vendor.rating,
                Vendor.response_sla_hours,
            )
            .select_from(Vendor)
            .join(VendorCountry, VendorCountry.vendor_id == Vendor.id)
            .join(vendor_services, vendor_services.c.vendor_id == Vendor.id)
            .join(project_services, project_services.c.service_id == vendor_services.c.service_id)
            .filter(
                VendorCountry.country == project.country.upper(),
                project_services.c.project_id == project.id,
            )
            .group_by(Vendor.id, Vendor.rating, Vendor.response_sla_hours)
            .having(overlap > 0)
            .order_by(Vendor.id)
            .all()
        )

        candidates = []
        for vendor_id, overlap_count, rating, sla_hours in rows:
            if not overlap_count:
                continue
            rating = Decimal(str(rating)) if rating is not None else Decimal("0")
            candidates.append(VendorCandidate(
                vendor_id=vendor_id,
                overlap_count=int(overlap_count),
                rating=rating,
                sla_hours=sla_hours,
                score=calculate_score(int(overlap_count), rating, sla_hours),
            ))

        logger.info(
            "candidates_computed",
            project_id=project.id,
            country=project.country,
            count=len(candidates)
        )
        return candidates


__all__ = [
    "VendorCandidate",
    "ScoringQuery",
    "sla_bonus",
    "calculate_score",
]
