"""Logging configuration for devstrip.

Uses Python's standard logging module, rendered through rich on stderr so
log lines never mix with the plan table on stdout. Verbosity levels:
warning(0), info(1), debug(2).
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Module-level logger
logger = logging.getLogger("devstrip")

_VERBOSITY_MAP = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}

_handler: RichHandler | None = None


def setup_logging(verbosity: int = 0, console: Console | None = None) -> None:
    """
    Configure the devstrip logger.

    Safe to call more than once; the handler is replaced, not duplicated.

    Args:
        verbosity: 0 for warnings only, 1 for info, 2 or more for debug
        console: Console to log to (defaults to a stderr console)
    """
    global _handler

    level = _VERBOSITY_MAP.get(min(max(verbosity, 0), 2), logging.WARNING)

    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=verbosity >= 2,
        markup=False,
    )
    _handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(level)
