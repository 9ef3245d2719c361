"""Tests for CLI logging setup."""

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from reportforge.logging import LOGGER_NAME, setup_logging


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


def _rich_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if isinstance(h, RichHandler)]


def test_attaches_one_handler():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.WARNING
    assert len(_rich_handlers(logger)) == 1


def test_repeated_calls_do_not_stack():
    setup_logging()
    logger = setup_logging(logging.DEBUG)
    assert len(_rich_handlers(logger)) == 1
    assert logger.level == logging.DEBUG


def test_module_loggers_route_to_console():
    buffer = io.StringIO()
    setup_logging(logging.DEBUG, console=Console(file=buffer, width=200))
    logging.getLogger("reportforge.extraction.assembler").debug("hello from assembler")
    assert "hello from assembler" in buffer.getvalue()
