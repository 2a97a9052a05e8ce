"""
Centralised logging configuration - powered by **loguru**.

Usage (any module)::

    from loguru import logger
    logger.info("Routing question")

Usage (entry-points - scripts)::

    from infrastructure.log import setup_logging
    setup_logging()              # defaults: INFO, stderr
    setup_logging("DEBUG")       # show every dispatch decision

Design:
    - ``loguru`` replaces stdlib ``logging`` everywhere.
    - ``setup_logging()`` is called once per entry-point; it also
      intercepts stdlib ``logging`` so LangChain, httpx, openai and
      qdrant-client records show up in the same sinks.
    - Chatty HTTP client loggers are raised to WARNING unless the
      caller asks for DEBUG.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional

from loguru import logger


_FMT_FULL = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

_FMT_COMPACT = "<level>{level: <8}</level> <level>{message}</level>"

# HTTP transports log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3")


class _InterceptHandler(logging.Handler):
    """Route stdlib ``logging`` records into **loguru**."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the stdlib call
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    level: str = "INFO",
    *,
    compact: bool = False,
    intercept_stdlib: bool = True,
    log_file: Optional[str] = None,
    quiet_loggers: Iterable[str] = _NOISY_LOGGERS,
) -> None:
    """
    Configure loguru for the current process.

    Args:
        level: Minimum log level (``DEBUG``, ``INFO``, ``WARNING``, …).
        compact: Drop timestamps and call sites (handy for demo output).
        intercept_stdlib: Route stdlib ``logging`` through loguru.
        log_file: Optional path to a rotating log file.
        quiet_loggers: stdlib loggers capped at WARNING unless *level*
                       is DEBUG.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=_FMT_COMPACT if compact else _FMT_FULL,
        level=level.upper(),
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        logger.add(
            log_file,
            format=_FMT_FULL,
            level=level.upper(),
            rotation="10 MB",
            retention="7 days",
            compression="gz",
        )

    if intercept_stdlib:
        logging.basicConfig(
            handlers=[_InterceptHandler()], level=0, force=True)
        if level.upper() != "DEBUG":
            for name in quiet_loggers:
                logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Loguru configured - level={}, compact={}", level, compact)
