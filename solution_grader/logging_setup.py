"""Logging configuration for the Solution Grader."""

import logging

from rich.logging import RichHandler

LOGGER_NAME = "solution_grader"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger.

    Installs a single RichHandler on the ``solution_grader`` logger;
    calling this again only updates the level.

    Args:
        level: Logging level name (e.g. "INFO", "DEBUG").

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)

    return logger
