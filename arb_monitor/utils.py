"""
Common helpers for the arbitrage monitor.

Timestamp handling and logger construction shared by the ``dex`` package
and the CLI.
"""

import logging
from datetime import datetime, timezone
from typing import Union


# Timestamp utilities
def utc_now_iso() -> str:
    """Current UTC time as an RFC 3339 / ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    return f"{seconds / 3600:.1f}h"


# Logging utilities
def get_logger(name: str, level: Union[str, int] = logging.INFO) -> logging.Logger:
    """
    Get a logger with the project's structured console format.

    Args:
        name: Logger name (typically __name__)
        level: Logging level, applied only if the logger has none yet

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
