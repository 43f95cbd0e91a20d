"""
Structured JSON Logging with Correlation ID
JSON formatter for stdlib logging plus the structlog pipeline configuration
"""

import logging
import sys
import os

import structlog
from pythonjsonlogger import jsonlogger
from asgi_correlation_id.context import correlation_id

SERVICE_NAME = 'expansion-vendor-matcher'


class CorrelationJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter with automatic correlation ID injection.

    The correlation ID comes from the request context (CorrelationIdMiddleware)
    or from the scheduler job run that emitted the record.
    """

    def add_fields(self, log_record, record, message_dict):
        """
        Add correlation_id, service and environment to every record.
        """
        super().add_fields(log_record, record, message_dict)

        log_record['correlation_id'] = correlation_id.get() or 'none'
        log_record['service'] = SERVICE_NAME
        log_record['environment'] = os.getenv('ENVIRONMENT', 'development')


def add_correlation_id(logger, method_name, event_dict):
    """structlog processor mirroring CorrelationJsonFormatter"""
    event_dict.setdefault('correlation_id', correlation_id.get() or 'none')
    return event_dict


def configure_structlog():
    """
    structlog renders JSON lines with ISO timestamps and the correlation ID.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            add_correlation_id,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ]
    )


def setup_logging(level: int = logging.INFO):
    """
    Configure structured JSON logging to stdout.

    Sets up the root logger with CorrelationJsonFormatter (for stdlib
    loggers such as SQLAlchemy, APScheduler and uvicorn) and configures
    structlog for application events.

    Returns:
        logging.Handler: The configured handler (for testing)
    """
    handler = logging.StreamHandler(sys.stdout)

    formatter = CorrelationJsonFormatter(
        '%(timestamp)s %(level)s %(name)s %(message)s',
        rename_fields={
            'timestamp': 'asctime',
            'level': 'levelname'
        }
    )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    configure_structlog()

    return handler
