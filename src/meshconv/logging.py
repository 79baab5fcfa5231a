"""Logging utilities for meshconv.

Records logged under the ``meshconv`` logger are routed into the active
reporter, so library code can use plain ``logging`` calls and still end up in
whatever output format the CLI selected.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .reporting import get_reporter

_LOGGER_NAME = "meshconv"
_STEP_PREFIX = "  ->"

# Lowest record level that maps onto each reporter channel, highest first.
_CHANNELS = (
    (logging.ERROR, "error"),
    (logging.WARNING, "warning"),
    (logging.INFO, "status"),
)

__all__ = [
    "get_logger",
    "configure_logging",
    "section",
    "step",
]


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


class _ReporterHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        rep = get_reporter()
        msg = self.format(record)
        for threshold, channel in _CHANNELS:
            if record.levelno >= threshold:
                getattr(rep, channel)(msg)
                return
        # DEBUG shows at -v, anything finer at -vv
        rep.verbose(msg, level=1 if record.levelno >= logging.DEBUG else 2)


def configure_logging(verbosity: int = 0) -> None:
    """Install the reporter-backed handler; ``-v`` enables DEBUG records."""
    logger = get_logger()
    if verbosity >= 2:
        logger.setLevel(logging.NOTSET + 1)
    elif verbosity == 1:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    handler = _ReporterHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def step(message: str) -> None:
    get_reporter().status(f"{_STEP_PREFIX} {message}")


@contextmanager
def section(title: str) -> Iterator[logging.Logger]:
    """Open a titled output section for the duration of the block."""
    logger = get_logger()
    get_reporter().section(title)
    try:
        yield logger
    finally:
        logger.debug("end section: %s", title)
