"""Logging level helpers shared by the CLI and the pipeline."""

from __future__ import annotations

import logging

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = (logging.ERROR, logging.INFO, logging.DEBUG)


def level_for_verbosity(verbosity: int) -> int:
    """Map a -v count to a logging level: 0 error, 1 info, 2 debug, 3+ trace."""
    if verbosity < 0:
        return logging.ERROR
    if verbosity >= len(_LEVELS):
        return TRACE
    return _LEVELS[verbosity]


def configure_logging(verbosity: int) -> None:
    logging.basicConfig(
        level=level_for_verbosity(verbosity),
        format="[%(levelname)s] %(message)s",
    )
