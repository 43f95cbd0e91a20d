"""
Match Statistics Aggregator

Windowed aggregates over match history: totals, average score, distinct
projects/vendors and the best-scoring vendors.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List
import structlog

from app.models import Match, Vendor

logger = structlog.get_logger(__name__)

DEFAULT_TOP_VENDORS = 10
TWO_PLACES = Decimal("0.01")


def average(values: List[Decimal]) -> Decimal:
    """Mean rounded to two places; 0.00 for no values."""
    if not values:
        return Decimal("0.00")
    total = sum((Decimal(str(v)) for v in values), Decimal("0"))
    return (total / len(values)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass
class VendorPerformance:
    vendor: Vendor
    average_score: Decimal
    match_count: int

    def to_dict(self):
        return {
            "vendor_id": self.vendor.id,
            "vendor_name": self.vendor.name,
            "average_score": float(self.average_score),
            "match_count": self.match_count,
        }


@dataclass
class WeeklyStats:
    total_matches: int = 0
    average_score: Decimal = Decimal("0.00")
    unique_projects: int = 0
    unique_vendors: int = 0
    top_vendors: List[VendorPerformance] = field(default_factory=list)

    def to_dict(self):
        return {
            "total_matches": self.total_matches,
            "average_score": float(self.average_score),
            "unique_projects": self.unique_projects,
            "unique_vendors": self.unique_vendors,
            "top_vendors": [v.to_dict() for v in self.top_vendors],
        }


def rank_vendors(matches: List[Match], limit: int = DEFAULT_TOP_VENDORS) -> List[VendorPerformance]:
    """
    Vendors by average score, highest first.

    Ties go to the vendor with more matches, then the lower vendor id.
    """
    by_vendor: Dict[int, List[Match]] = defaultdict(list)
    for match in matches:
        by_vendor[match.vendor_id].append(match)

    ranked = [
        VendorPerformance(
            vendor=vendor_matches[0].vendor,
            average_score=average([m.score for m in vendor_matches]),
            match_count=len(vendor_matches),
        )
        for vendor_matches in by_vendor.values()
    ]
    ranked.sort(key=lambda p: (-p.average_score, -p.match_count, p.vendor.id))
    return ranked[:limit]


class StatisticsAggregator:
    """
    Usage:
        stats = StatisticsAggregator(MatchRepository(db)).weekly_stats(window_start)
    """

    def __init__(self, repository, top_vendors_limit: int = DEFAULT_TOP_VENDORS):
        self.repository = repository
        self.top_vendors_limit = top_vendors_limit

    def weekly_stats(self, window_start: datetime) -> WeeklyStats:
        """
        Aggregate all matches created at or after window_start.
        """
        matches = self.repository.created_since(window_start)

        stats = WeeklyStats(
            total_matches=len(matches),
            average_score=average([m.score for m in matches]),
            unique_projects=len({m.project_id for m in matches}),
            unique_vendors=len({m.vendor_id for m in matches}),
            top_vendors=rank_vendors(matches, self.top_vendors_limit),
        )

        logger.info(
            "weekly_stats_computed",
            window_start=window_start.isoformat(),
            total_matches=stats.total_matches,
            average_score=str(stats.average_score),
            unique_projects=stats.unique_projects,
            unique_vendors=stats.unique_vendors
        )
        return stats


__all__ = [
    "StatisticsAggregator",
    "WeeklyStats",
    "VendorPerformance",
    "rank_vendors",
    "average",
]
