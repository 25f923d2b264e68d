"""Logging setup shared by the CLI and embedding applications."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers kept at WARNING even when ledgercore logs at DEBUG
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
]


def setup_logging(level: Optional[str | int] = None) -> logging.Logger:
    """Configure the ledgercore logger with one stderr handler.

    Only the ``ledgercore`` logger hierarchy is configured, so applications
    embedding the ledger keep control of the root logger.

    Args:
        level: Level name (e.g. "INFO") or number. Defaults to WARNING.

    Returns:
        The configured ``ledgercore`` logger

    Raises:
        ValueError: If level is not a known level name
    """
    if level is None:
        level = logging.WARNING
    elif isinstance(level, str):
        name = level.strip().upper()
        resolved = logging.getLevelName(name)
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level '{level}'")
        level = resolved

    logger = logging.getLogger("ledgercore")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging initialized at %s", logging.getLevelName(level))
    return logger
