"""
Expansion Vendor Matcher - Main Application
FastAPI Entry Point with APScheduler for match refresh, SLA monitoring and reports
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
import structlog

from app.config import settings
from app.database import init_db
from app.middleware.correlation_id import CorrelationIdMiddleware
from app.routers import analytics_router, matches_router, scheduler_router
from app.scheduler import start_scheduler, stop_scheduler
from app.services.monitoring import setup_logging
from app.services.scheduler_service import get_scheduler_service

# Structured Logging Setup
setup_logging()
logger = structlog.get_logger()

# FastAPI App
app = FastAPI(
    title="Expansion Vendor Matcher",
    description="Matches client expansion projects against the vendor pool and keeps matches fresh",
    version="0.1.0",
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(CorrelationIdMiddleware)

# Register routers
app.include_router(scheduler_router)
app.include_router(matches_router)
app.include_router(analytics_router)

# APScheduler instance, set on startup
scheduler = None


@app.on_event("startup")
async def startup_event():
    """Application Startup"""
    global scheduler
    logger.info("startup", environment=settings.environment)

    # Initialize database connection
    init_db()
    logger.info("database_initialized")

    # Start calendar triggers (skipped in testing)
    scheduler = start_scheduler(get_scheduler_service(), environment=settings.environment)


@app.on_event("shutdown")
async def shutdown_event():
    """Application Shutdown"""
    logger.info("shutdown")
    stop_scheduler(scheduler)


@app.get("/")
async def root():
    """Root Endpoint"""
    return {
        "message": "Expansion Vendor Matcher API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """
    Health Check Endpoint
    """
    health_status = {
        "status": "healthy",
        "environment": settings.environment,
        "services": {
            "api": "running",
            "scheduler": "running" if scheduler is not None and scheduler.running else "stopped"
        }
    }

    if settings.database_url:
        health_status["services"]["database"] = "configured"

    if settings.mongodb_url:
        health_status["services"]["mongodb"] = "configured"

    if settings.smtp_host:
        health_status["services"]["smtp"] = "configured"

    return JSONResponse(
        content=health_status,
        status_code=200
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development"
    )
