"""Loguru sinks for the agentweave runtime.

Library modules only ever do ``from loguru import logger``.  Processes that
own stderr (the CLI, an embedding application) call :func:`setup_logging`
once; the level and format default to ``AGENTWEAVE_LOG_LEVEL`` and
``AGENTWEAVE_LOG_JSON``.  Records emitted through stdlib ``logging`` (httpx,
httpcore) are forwarded into the same sink.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

from agentweave.runtime.settings import get_settings

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

QUIET_LOGGERS = ("httpx", "httpcore")
"""Stdlib loggers capped at WARNING; their INFO lines repeat every request."""


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping the original call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str | None = None, *, json: bool | None = None) -> None:
    """Replace every loguru sink with a single stderr sink.

    ``level`` and ``json`` fall back to the runtime settings when omitted.
    Tracebacks never include local variable values (``diagnose=False``), so
    API keys held by backends stay out of the log.
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    json = settings.log_json if json is None else json

    logger.remove()
    if json:
        logger.add(sys.stderr, level=level, serialize=True, diagnose=False)
    else:
        logger.add(sys.stderr, level=level, format=TEXT_FORMAT, diagnose=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging initialised (level={}, json={})", level, json)
