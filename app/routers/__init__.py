"""
API routers package
"""

from app.routers.scheduler import router as scheduler_router
from app.routers.matches import router as matches_router
from app.routers.analytics import router as analytics_router
