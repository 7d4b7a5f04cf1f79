"""
initializable/core/logging.py
structlog loggers for lifecycle events
"""

import logging
import sys
from typing import IO, Optional
import structlog
from structlog.stdlib import BoundLogger
from .config import get_settings

LIBRARY_LOGGER = "initializable"

# handler installed by setup_logging(), replaced on every call
_handler: Optional[logging.Handler] = None


def _renderer(log_format: str):
    if log_format == "json":
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=False)]


def setup_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> BoundLogger:
    """
    Route lifecycle events through structlog to the "initializable" stdlib logger.

    Only the library's logger gets a handler; the root logger is left alone
    so embedding applications keep their own logging setup.

    Args:
        level: Overrides LOG_LEVEL (e.g. "DEBUG")
        log_format: Overrides LOG_FORMAT ("json" or "console")
        stream: Where to write, stdout by default

    Returns:
        The lifecycle logger
    """
    global _handler
    settings = get_settings()
    level = (level or settings.LOG_LEVEL).upper()
    log_format = log_format or settings.LOG_FORMAT

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    if _handler is not None:
        library_logger.removeHandler(_handler)
    _handler = logging.StreamHandler(stream or sys.stdout)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    library_logger.addHandler(_handler)
    library_logger.setLevel(getattr(logging, level))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            *_renderer(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = get_logger("lifecycle")
    logger.debug("logging_configured", level=level, format=log_format)
    return logger


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """
    Get a logger instance

    Args:
        name: Logger name under "initializable" (e.g., "lifecycle")
    """
    if name:
        return structlog.get_logger(f"{LIBRARY_LOGGER}.{name}")
    return structlog.get_logger(LIBRARY_LOGGER)


class LogContext:
    """
    Bind structlog context variables for the duration of a block.

    Used around each initialization task, so anything on_init() or
    on_ready() logs carries lifecycle_owner and lifecycle_generation.
    Previous values of the same keys are restored on exit.
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._tokens = {}

    def __enter__(self):
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        structlog.contextvars.reset_contextvars(**self._tokens)
        return False


__all__ = ["setup_logging", "get_logger", "LogContext"]
