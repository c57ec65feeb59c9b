"""Logging configuration for pyckit.

Quiet by default (WARNING). Singular systems are reported as warnings;
per-frame step statistics are emitted at DEBUG.

Usage:
    from pyckit.logging import logger, enable_debug_logging

    enable_debug_logging()
    logger.debug("now visible")
"""

import logging
import sys

logger = logging.getLogger("pyckit")

# Default: WARNING level only
logger.setLevel(logging.WARNING)

if not logger.handlers:
    _default_handler = logging.StreamHandler(sys.stdout)
    _default_handler.setLevel(logging.WARNING)
    _default_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_default_handler)


class FlushingHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit."""

    def emit(self, record):
        super().emit(record)
        self.flush()


def enable_debug_logging(with_name: bool = False):
    """Enable DEBUG level logging with immediate flush.

    Args:
        with_name: If True, prefix each line with the logger name and level.
    """
    logger.setLevel(logging.DEBUG)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = FlushingHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    fmt = "%(name)s %(levelname)s: %(message)s" if with_name else "%(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def set_log_level(level: int):
    """Set the logging level.

    Args:
        level: logging.DEBUG, logging.INFO, logging.WARNING, etc.
    """
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
