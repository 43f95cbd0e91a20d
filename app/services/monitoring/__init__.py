"""
Monitoring Module
Exports for structured logging
"""

from app.services.monitoring.logging import setup_logging, configure_structlog, CorrelationJsonFormatter

__all__ = [
    "setup_logging",
    "configure_structlog",
    "CorrelationJsonFormatter",
]
