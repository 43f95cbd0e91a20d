"""
Analytics Service
Top vendors per country combined with research-document coverage
"""

from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session
from pymongo.errors import PyMongoError
import structlog

from app.models import Match, Project, Vendor, VendorCountry

logger = structlog.get_logger(__name__)

TOP_VENDORS_PER_COUNTRY = 3


class AnalyticsService:
    """
    Usage:
        analytics = AnalyticsService(db, research_document_store)
        report = analytics.top_vendors_with_research_data()
    """

    def __init__(
        self,
        db: Session,
        document_store,
        lookback_days: int = 30,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.db = db
        self.document_store = document_store
        self.lookback_days = lookback_days
        self.clock = clock

    def top_vendors_by_country(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Vendors per covered country ranked by average match score over the lookback window.
        """
        since = self.clock() - timedelta(days=self.lookback_days)
        avg_score = func.avg(Match.score)

        rows = (
            self.db.query(
                VendorCountry.country,
                Vendor.id,
                Vendor.name,
                avg_score.label("avg_score"),
            )
            .select_from(Vendor)
            .join(VendorCountry, VendorCountry.vendor_id == Vendor.id)
            .join(Match, Match.vendor_id == Vendor.id)
            .filter(Match.created_at >= since)
            .group_by(VendorCountry.country, Vendor.id, Vendor.name)
            .order_by(VendorCountry.country, avg_score.desc(), Vendor.id)
            .all()
        )

        by_country: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for country, vendor_id, vendor_name, average in rows:
            by_country[country].append({
                "vendor_id": vendor_id,
                "vendor_name": vendor_name,
                "avg_score": float(Decimal(str(average)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
            })
        return by_country

    def project_ids_by_country(self, country: str) -> List[int]:
        rows = self.db.query(Project.id).filter(func.upper(Project.country) == country.upper()).all()
        return [row[0] for row in rows]

    def top_vendors_with_research_data(self) -> List[Dict[str, Any]]:
        """
        Per country: top 3 vendors and the research documents linked to the country's projects.

        A document store failure degrades that country's count to 0.
        """
        result = []
        for country, vendors in self.top_vendors_by_country().items():
            project_ids = self.project_ids_by_country(country)
            try:
                research_doc_count = self.document_store.count_by_project_ids(project_ids)
            except PyMongoError as e:
                logger.warning("research_document_count_failed", country=country, error=str(e))
                research_doc_count = 0

            result.append({
                "country": country,
                "research_doc_count": research_doc_count,
                "top_vendors": vendors[:TOP_VENDORS_PER_COUNTRY],
            })

        logger.info("analytics_top_vendors_computed", countries=len(result))
        return result
