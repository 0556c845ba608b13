"""
Logging configuration for gclog.

Routes records from stdlib ``logging`` (uvicorn, libraries, application
modules) into a GcLogger so everything lands in one sink with one threshold.
"""

import logging
from typing import Optional

from gclog.writer import GcLogger


class GcLogHandler(logging.Handler):
    """stdlib handler that forwards every record to a GcLogger."""

    def __init__(self, service: GcLogger):
        super().__init__(level=logging.NOTSET)
        self.service = service

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.service.write_record(record)
        except Exception:
            self.handleError(record)


def setup_logging(
    service: GcLogger,
    logger_name: Optional[str] = None,
    clear_handlers: bool = True,
) -> GcLogHandler:
    """
    Send stdlib logging output through ``service``.

    Args:
        service: The GcLogger that owns the sink and threshold
        logger_name: Logger to attach to (default: the root logger)
        clear_handlers: Remove existing handlers first so records are not
            printed twice (default: True)

    Returns:
        The installed handler

    Example:
        >>> service = GcLogger()
        >>> setup_logging(service)
        >>> logging.getLogger("uvicorn.error").warning("slow request")
    """
    target_logger = logging.getLogger(logger_name)
    # The GcLogger threshold does the filtering, let everything through here.
    target_logger.setLevel(1)

    if clear_handlers:
        target_logger.handlers.clear()

    handler = GcLogHandler(service)
    target_logger.addHandler(handler)

    service.verbose("stdlib logging routed to gclog: logger=%s", logger_name or "root")
    return handler
