"""
Correlation ID Middleware
Correlation ID injection for HTTP requests and scheduler job runs
"""

from contextlib import contextmanager
from uuid import uuid4

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id

# Re-export CorrelationIdMiddleware for convenience
__all__ = ["CorrelationIdMiddleware", "job_correlation_id"]


@contextmanager
def job_correlation_id(job_id: str):
    """
    Scope a fresh correlation ID around one scheduler job run.

    Scheduled runs execute in APScheduler worker threads without a request
    context. Manual triggers keep the ID of the triggering request.

    Yields:
        str: The correlation ID in effect for the run
    """
    existing = correlation_id.get()
    if existing:
        yield existing
        return

    token = correlation_id.set(f"{job_id}-{uuid4().hex[:12]}")
    try:
        yield correlation_id.get()
    finally:
        correlation_id.reset(token)
