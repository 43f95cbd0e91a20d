"""
Database Configuration and Session Management

One engine per process, created by init_db() from DATABASE_URL. PostgreSQL
is the production target; SQLite works for local runs and tests.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings
import logging

logger = logging.getLogger(__name__)

engine = None
SessionLocal = None


def normalize_database_url(database_url: str) -> str:
    """Route plain postgresql:// URLs through the psycopg3 driver."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return database_url


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        # Scheduler jobs open sessions from APScheduler worker threads
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


def init_db():
    """Create the engine and session factory, or disable DB features when unconfigured"""
    global engine, SessionLocal

    if not settings.database_url:
        logger.warning("DATABASE_URL not configured - matching and scheduler features disabled")
        return

    database_url = normalize_database_url(settings.database_url)
    engine = create_engine(database_url, **_engine_options(database_url))
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info("Database connection established (dialect=%s)", engine.dialect.name)


def get_db():
    """
    Dependency for getting database session
    Usage: db: Session = Depends(get_db)

    Yields None if the database is not configured
    """
    if SessionLocal is None:
        logger.warning("Database not configured")
        yield None
        return

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


Base = declarative_base()
