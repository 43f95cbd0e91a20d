"""
SLA Monitor
Flags vendors whose most recent match is older than their response SLA
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional
import structlog

from app.models import Match, Vendor

logger = structlog.get_logger(__name__)

SECONDS_PER_HOUR = 3600


@dataclass
class SlaBreach:
    vendor: Vendor
    most_recent_match: Match
    deadline: datetime
    hours_overdue: int

    def to_dict(self):
        return {
            "vendor_id": self.vendor.id,
            "vendor_name": self.vendor.name,
            "sla_hours": self.vendor.response_sla_hours,
            "match_id": self.most_recent_match.id,
            "project_id": self.most_recent_match.project_id,
            "match_created_at": self.most_recent_match.created_at.isoformat(),
            "deadline": self.deadline.isoformat(),
            "hours_overdue": self.hours_overdue,
        }


def evaluate_sla(vendor: Vendor, match: Match, as_of: datetime) -> Optional[SlaBreach]:
    """
    SLA check for one vendor against its most recent match.

    Overdue only when as_of is strictly after the deadline; hours_overdue
    is rounded down to whole hours.
    """
    deadline = match.created_at + timedelta(hours=vendor.response_sla_hours)
    if as_of <= deadline:
        return None

    overdue_seconds = (as_of - deadline).total_seconds()
    return SlaBreach(
        vendor=vendor,
        most_recent_match=match,
        deadline=deadline,
        hours_overdue=int(overdue_seconds // SECONDS_PER_HOUR),
    )


class SlaMonitor:
    """
    Usage:
        breaches = SlaMonitor(MatchRepository(db)).find_expired(datetime.utcnow())
    """

    def __init__(self, repository):
        self.repository = repository

    def find_expired(self, as_of: datetime) -> List[SlaBreach]:
        """
        Vendors overdue as of the given time. Empty list means fully compliant.
        """
        latest = self.repository.latest_match_per_vendor()
        logger.info("sla_check_started", vendors_with_matches=len(latest), as_of=as_of.isoformat())

        breaches = []
        for vendor, match in latest:
            breach = evaluate_sla(vendor, match, as_of)
            if breach:
                breaches.append(breach)

        logger.info("sla_check_completed", expired=len(breaches))
        return breaches


__all__ = ["SlaMonitor", "SlaBreach", "evaluate_sla"]
