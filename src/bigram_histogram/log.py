"""Logging setup for the command line.

Library modules only create loggers; handlers are installed here, once, by
the CLI.
"""

import logging
import sys

LOGGER_NAME = "bigram_histogram"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """Send package logs to stderr at the given level. Safe to call twice."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
