"""
Logger factory and helpers.

Provides:
- get_logger(): Get a configured logger instance
- log_with_context(): Bind context to a logger for a scope
"""

from __future__ import annotations

import structlog
from structlog.stdlib import BoundLogger

from shared.logging_config import hash_ip, setup_logging

__all__ = ["get_logger", "log_with_context", "hash_ip", "setup_logging"]


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("login_success", user_id="123")
    """
    return structlog.get_logger(name)


def log_with_context(logger: BoundLogger, **context) -> BoundLogger:
    """
    Bind context to a logger for all subsequent log calls.

    Example:
        >>> log = log_with_context(get_logger(__name__), user_id="123")
        >>> log.info("otp_sent")  # includes user_id
    """
    return logger.bind(**context)
