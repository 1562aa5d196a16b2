"""Logging setup for the command-line entrypoints."""

from __future__ import annotations

import logging
import sys


class SimpleFormatter(logging.Formatter):
    """Simple formatter for console output."""

    def __init__(self) -> None:
        super().__init__(fmt="%(levelname)-8s | %(name)s | %(message)s")


def setup_logging(verbose: bool = False) -> None:
    """Send docscrub log records to stderr.

    Args:
        verbose: Log per-file successes and debug details
    """
    level = logging.DEBUG if verbose else logging.INFO

    logger = logging.getLogger("docscrub")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(SimpleFormatter())
    logger.addHandler(handler)
    logger.propagate = False
