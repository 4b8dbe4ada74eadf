# gguf_header/logging.py
"""
Logging setup using Loguru.

The library logs under the ``gguf_header`` name and stays silent until a
caller (the ``gguf-info`` command, or an application) opts in here.
"""
from __future__ import annotations

import sys

from loguru import logger

PACKAGE = "gguf_header"


def configure_logging(*, debug: bool = False, quiet: bool = False) -> None:
    """Install a stderr sink and enable the package's log records.

    Args:
        debug: Emit DEBUG records with tracebacks annotated by loguru.
        quiet: Only emit warnings and errors. Ignored when ``debug`` is set.
    """
    logger.remove()
    level = "DEBUG" if debug else ("WARNING" if quiet else "INFO")
    fmt = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
        "| <level>{level: <8}</level> "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> "
        "- <level>{message}</level>"
    )
    logger.add(sys.stderr, level=level, format=fmt, backtrace=debug, diagnose=debug)
    logger.enable(PACKAGE)
