"""Logging configuration utility."""

import logging
import sys


def setup_logging(verbose=False, stream=None):
    """Configure root logger with appropriate level and format.

    Log lines go to *stream*, stdout by default.
    """
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
