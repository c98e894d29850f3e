"""Logging helpers with consistent formatting."""

from __future__ import annotations

import logging
import sys

from rich.logging import RichHandler

from joblock.utils.env import get_bool_env


def get_logger(name: str, level: int = logging.INFO, *, rich: bool | None = None) -> logging.Logger:
    """Configure and return a logger.

    Rich output can be disabled globally with ``JOBLOCK_PLAIN_LOGS=1`` which is
    handy when worker output is shipped to a log collector.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if rich is None:
        rich = not get_bool_env("JOBLOCK_PLAIN_LOGS", default=False)

    logger.setLevel(level)

    if rich:
        handler: logging.Handler = RichHandler(
            level=level,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            show_time=True,
            show_path=False,
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s %(name)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False
    return logger
