"""loguru setup for cmdgraph: one stderr sink, optionally a rotating file."""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator

from loguru import logger

from ..config.settings import Settings, get_settings

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> | "
    "{message}"
)


def _stderr_sink(message: str) -> None:
    # resolved per message so redirected or captured streams are honoured
    sys.stderr.write(message)


def configure_logging(settings: Settings | None = None, level: str | None = None) -> None:
    """Replace every loguru sink according to ``policies.observability``.

    ``level`` overrides the policy level, e.g. ``DEBUG`` for ``--verbose``.
    """

    active = settings or get_settings()
    observability = active.policies.observability
    threshold = (level or observability.log_level).upper()

    logger.remove()
    logger.configure(extra={"module": "-"})
    logger.add(_stderr_sink, level=threshold, format=_LOG_FORMAT, backtrace=False, diagnose=False)
    if observability.log_to_file:
        active.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            active.log_file,
            level=threshold,
            format=_LOG_FORMAT,
            rotation=observability.rotation,
            retention=observability.retention,
        )


def get_logger(**context: Any):
    """Logger bound to ``context``; modules pass ``module=__name__``."""

    return logger.bind(**context)


@contextmanager
def logging_context(**context: Any) -> Iterator[Any]:
    with logger.contextualize(**context):
        yield logger


@contextmanager
def log_timing(step: str, *, logger_=logger) -> Iterator[None]:
    """Log how long the enclosed block took, even when it raises."""

    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger_.info("Step timing", step=step, elapsed_ms=round(elapsed_ms, 3))


__all__ = ["configure_logging", "get_logger", "logging_context", "log_timing"]
