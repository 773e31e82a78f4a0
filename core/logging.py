"""Logging configuration for Timeline of Me"""
import logging
import sys

from core.config import get_settings
from middleware.correlation import CorrelationIdFilter


def setup_logging():
    """Configure application-wide logging (records carry the request's correlation ID)"""
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s",
        handlers=[handler],
    )

    # Azure SDK request/response logging is very chatty at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get logger for module"""
    return logging.getLogger(name)
