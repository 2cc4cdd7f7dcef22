"""
Logging configuration for readme-generator.

Diagnostics go to stderr through rich so they never mix with the README or the
progress output on stdout.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "readme_generator"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        verbose: Log at DEBUG instead of WARNING.

    Returns:
        The configured `readme_generator` logger.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Repeated calls (tests, multiple CLI invocations in one process) reuse the handler.
    for handler in logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)
            return logger

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)

    return logger
