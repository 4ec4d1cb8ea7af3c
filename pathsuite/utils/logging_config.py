"""Logging setup for the command-line interface."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: Optional[str] = None, console: Optional[Console] = None) -> logging.Logger:
    """Route pathsuite logs through a rich handler.

    Args:
        level: Logging level name (default: WARNING)
        console: Console to write to (default: stderr)

    Returns:
        The package logger
    """
    logger = logging.getLogger("pathsuite")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, (level or "WARNING").upper(), logging.WARNING))
    return logger
