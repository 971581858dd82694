"""
Logging configuration for the scan2order service.

Usage:
    from scan2order.logging_config import setup_logging
    setup_logging()  # Call once at application startup

Environment variables:
    LOG_LEVEL: Set to DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)

Outside DEBUG the libraries in NOISY_LOGGERS are held at WARNING: per-request
access lines, SQL echo and rate-limit chatter would otherwise drown the order
lifecycle messages the kitchen actually reads. Switching back to DEBUG lets
them through again.
"""
import logging
import os
import sys

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "uvicorn.access",
    "uvicorn.error",
    "slowapi",
    "httpx",
    "httpcore",
)


def resolve_level(level: str = None) -> str:
    """Level name from the argument or LOG_LEVEL; anything unknown means INFO."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.strip().upper()
    return level if level in VALID_LEVELS else "INFO"


def setup_logging(level: str = None) -> str:
    """
    Configure logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If not provided, reads from LOG_LEVEL env var, defaults to INFO.

    Returns:
        The level name that was applied.
    """
    level = resolve_level(level)
    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    logging.getLogger("scan2order").setLevel(numeric_level)

    # NOTSET hands the decision back to the root logger
    library_level = logging.NOTSET if level == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured at %s level", level)
    return level
