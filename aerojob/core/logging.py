"""
Logging setup.

Every module logs through logging.getLogger(__name__); this module only
attaches the console handler to the "aerojob" logger once at startup.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Defaults to
            the LOG_LEVEL setting.

    Returns:
        The "aerojob" logger.
    """
    global _configured

    if level is None:
        from aerojob.core.config import get_settings
        level = get_settings().log_level

    logger = logging.getLogger("aerojob")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
        _configured = True

    return logger
