"""Tests for CLI logging setup (cli/logging_config.py)."""

from __future__ import annotations

import logging

import pytest

from ffprovision.cli.logging_config import PACKAGE_LOGGER, configure_logging, level_for_verbosity


@pytest.mark.parametrize(
    ("verbosity", "level"),
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
)
def test_level_for_verbosity(verbosity: int, level: int) -> None:
    assert level_for_verbosity(verbosity) == level


def test_handler_attached_once() -> None:
    configure_logging(0)
    logger = configure_logging(2)

    assert logger is logging.getLogger(PACKAGE_LOGGER)
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_rich_handler_when_available() -> None:
    from rich.logging import RichHandler

    logger = configure_logging(1)
    assert isinstance(logger.handlers[0], RichHandler)


def test_module_loggers_inherit_package_level() -> None:
    configure_logging(1)
    child = logging.getLogger("ffprovision.core.installer")
    assert child.getEffectiveLevel() == logging.INFO
