"""
Logging setup - one place that configures the application loggers.

Every module logs through logging.getLogger("family_calendar.<area>"); this
attaches a single console handler to the "family_calendar" parent logger so
all of them share the same format.
"""

import logging
import sys


LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the "family_calendar" logger hierarchy.

    Safe to call more than once (e.g. one app per test): the handler is
    only attached the first time, later calls just update the level.

    Args:
        level: Level name such as "DEBUG" or "INFO"

    Returns:
        The configured parent logger
    """
    logger = logging.getLogger("family_calendar")
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
