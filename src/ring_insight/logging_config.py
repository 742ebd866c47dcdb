"""
Logging for Ring Insight.

All module loggers live under the ``ring_insight`` namespace
(``ring_insight.insights.kernel``, ``ring_insight.logs.search``, ...).
``setup_logging`` owns the handlers of that namespace: a Rich console handler
on stderr and, optionally, a plain-text file that records every DEBUG line
regardless of the console level.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "ring_insight"

# Analysis work runs on worker threads, so file lines carry the thread name
FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"


def _console_level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def _reset_handlers(logger: logging.Logger) -> None:
    """Drop handlers from an earlier setup_logging call in this process."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the ``ring_insight`` logger.

    Args:
        verbose: Console shows DEBUG lines, with paths and locals in tracebacks
        quiet: Console shows errors only
        log_file: Append a full DEBUG log of the run to this path

    Returns:
        The ``ring_insight`` logger
    """
    level = _console_level(verbose, quiet)
    logger = logging.getLogger(ROOT_LOGGER)
    _reset_handlers(logger)

    console_handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_path=verbose,
    )
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(level)

    # Handlers are ours; do not double-log through whatever the root has
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for a module, placed under the ``ring_insight`` namespace."""
    if name is None or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
