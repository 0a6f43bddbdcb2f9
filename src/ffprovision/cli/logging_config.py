"""Logging setup for the command line.

Library modules only create loggers; handlers are attached here, once,
on the ``ffprovision`` package logger.  Rich renders the records when it
is installed, otherwise a plain stderr handler is used.
"""

from __future__ import annotations

import logging

from ffprovision.cli.console import get_rich_console
from ffprovision.exceptions import EnvironmentError


PACKAGE_LOGGER: str = "ffprovision"
PLAIN_FORMAT: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    """Map the number of ``-v`` flags to a logging level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def _build_handler() -> logging.Handler:
    try:
        from rich.logging import RichHandler

        console = get_rich_console()
    except (ModuleNotFoundError, EnvironmentError):
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        return handler
    return RichHandler(console=console, show_path=False, rich_tracebacks=True)


def configure_logging(verbosity: int = 0) -> logging.Logger:
    """Attach a single handler to the package logger and set its level."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(_build_handler())
    logger.setLevel(level_for_verbosity(verbosity))
    logger.propagate = False
    return logger
