"""
Middleware Module
ASGI middleware for request processing
"""

from app.middleware.correlation_id import CorrelationIdMiddleware, job_correlation_id

__all__ = ["CorrelationIdMiddleware", "job_correlation_id"]
