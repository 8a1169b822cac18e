"""Logging setup for service-registrar.

Usage:
    from service_registrar.infra.logging import setup_logging

    setup_logging()  # reads LOG_* settings once
"""

from service_registrar.infra.logging.config import configure_logging, setup_logging
from service_registrar.infra.logging.formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "setup_logging",
]
