"""Observability for ascom-facade.

Provides structured logging and the LogSink boundary through which a
host application can receive (severity, component, message) triples.

Example:
    from ascom_facade.observability import LogContext, get_logger

    logger = get_logger(__name__)

    with LogContext(device_type="telescope", device_number=0):
        logger.info("Slew requested", ra=5.5, dec=-12.0)
"""

from ascom_facade.observability.logging import (
    LogContext,
    LogSink,
    LogSinkHandler,
    StructuredLogger,
    configure_logging,
    get_logger,
    install_log_sink,
    reset_logging,
)

__all__ = [
    "LogContext",
    "LogSink",
    "LogSinkHandler",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "install_log_sink",
    "reset_logging",
]
