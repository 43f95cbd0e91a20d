"""
Application Configuration
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    database_url: Optional[str] = None
    mongodb_url: Optional[str] = None
    mongodb_database: str = "expanders360"

    # Environment
    environment: str = "development"

    # Email Notifications
    admin_email: str = "admin@expanders360.com"
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from_email: str = '"Expanders 360" <no-reply@expanders360.com>'
    smtp_timeout_seconds: int = 10

    # Scheduler (all triggers evaluated in UTC)
    scheduler_timezone: str = "UTC"
    match_refresh_hour: int = 6
    sla_check_hour: int = 8
    weekly_stats_day_of_week: str = "mon"
    weekly_stats_hour: int = 9

    # Match refresh pacing between projects
    refresh_pacing_seconds: float = 1.0

    # Reporting windows
    stats_window_days: int = 7
    top_vendors_limit: int = 10
    analytics_lookback_days: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
