"""Logging configuration for the reportforge CLI.

Library modules only create module-level loggers; handlers are attached
here, once, by the command-line entry point.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "reportforge"


def setup_logging(level: int = logging.WARNING, console: Console | None = None) -> logging.Logger:
    """Attach a RichHandler to the reportforge logger.

    Idempotent: repeated calls replace the handler rather than stacking
    another one.

    Args:
        level: Threshold for the reportforge logger.
        console: Console to log to. Defaults to a stderr console.

    Returns:
        The configured reportforge logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger
