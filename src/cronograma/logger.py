"""Logging configuration for Cronograma with custom verbosity levels."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

# Custom levels between the standard ones
CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30) - date adjustments
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20) - every edge evaluated

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

# Verbosity 0 shows only errors, 1 date adjustments, 2 every constraint
# check, 3 calendar walking details
_LEVEL_MAP = {
    0: logging.ERROR,
    1: CHANGES_LEVEL,
    2: CHECKS_LEVEL,
    3: logging.DEBUG,
}


class CronogramaLogger(logging.Logger):
    """Logger with semantic verbosity methods.

    - changes(): verbosity 1 - tasks moved, edges ignored, containers rolled up
    - checks(): verbosity 2 - constraints evaluated, iteration boundaries
    - debug(): verbosity 3 - everything else
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log changes (verbosity level 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log checks (verbosity level 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> CronogramaLogger:
    """Get the cronograma logger instance (singleton)."""
    logging.setLoggerClass(CronogramaLogger)
    logger = logging.getLogger("cronograma")
    assert isinstance(logger, CronogramaLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the cronograma logger with a verbosity level.

    Can be called multiple times to reconfigure the logger.

    Args:
        verbosity: 0=silent (errors only), 1=changes, 2=checks, 3=debug
        stream: Optional output stream (defaults to sys.stderr, useful for testing)
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVEL_MAP.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Reset the logger to a clean, silent state."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)
