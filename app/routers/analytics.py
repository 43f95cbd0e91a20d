"""
Analytics API Router
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.services.analytics import AnalyticsService
from app.services.mongodb_client import research_document_store

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


def get_document_store():
    return research_document_store


@router.get("/top-vendors")
def top_vendors(db: Session = Depends(get_db), document_store=Depends(get_document_store)):
    """
    Top 3 vendors per country with research document counts
    """
    if db is None:
        raise HTTPException(status_code=503, detail="Database not configured")

    analytics = AnalyticsService(db, document_store, lookback_days=settings.analytics_lookback_days)
    return {"countries": analytics.top_vendors_with_research_data()}
