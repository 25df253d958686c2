"""Logging setup for the CLI"""

import logging
import sys


LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Attach a single stderr handler to the mdsite logger at the given level."""
    logger = logging.getLogger("mdsite")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
