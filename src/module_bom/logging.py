"""Build log setup.

Every module logs through ``get_logger(__name__)``; the loggers hang off a
single ``module_bom`` logger that writes to the shared rich console.
"""

import logging

from rich.highlighter import NullHighlighter
from rich.logging import RichHandler

from module_bom.console import console

LOGGER_NAME = "module_bom"


def resolve_level(verbose: bool = False, quiet: bool = False, log_level: str | None = None) -> int:
    """Pick the log level from the CLI flags; an explicit level wins."""
    if log_level:
        return getattr(logging, log_level.upper())
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(verbose: bool = False, quiet: bool = False, log_level: str | None = None) -> None:
    """Install the rich handler on the package logger.

    Calling it again replaces the handler, so the CLI can be invoked more
    than once in a process.
    """
    level = resolve_level(verbose, quiet, log_level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    # tool output is logged verbatim
    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        highlighter=NullHighlighter(),
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"

    return logging.getLogger(name)
