"""structlog setup shared by the CLI and the library modules."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional, cast

import structlog
from structlog.contextvars import bound_contextvars
from structlog.stdlib import BoundLogger, ProcessorFormatter
from structlog.types import Processor

from s3deploy import __version__

if TYPE_CHECKING:
    from s3deploy.config.config import Settings

SERVICE_NAME = "s3deploy"


def _coerce_level(level: str | int) -> int:
    """Map a level name ("debug", "WARNING") or number to a logging level."""
    if isinstance(level, int):
        return level
    try:
        return logging.getLevelNamesMapping()[level.upper()]
    except KeyError:
        raise ValueError(f"Invalid log level: {level}") from None


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def configure_logging(
    settings: Optional["Settings"] = None,
    *,
    level: str | int | None = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Send structlog and stdlib records through one stderr handler.

    ``level`` and ``json_output`` override the values carried by ``settings``.
    With neither given the level is INFO and output is rendered for a console.

    Loggers from :func:`get_logger` look the configuration up when they are
    first used, so calling this after modules were imported still takes
    effect for their module-level loggers.
    """
    if level is None:
        level = settings.log_level if settings is not None else "INFO"
    if json_output is None:
        json_output = settings.json_logs if settings is not None else False

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            *_pre_chain(),
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.format_exc_info,
            ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=_pre_chain(),
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_coerce_level(level))


def get_logger(name: str, **initial_values: Any) -> BoundLogger:
    """Lazy logger carrying the service name and version."""
    return cast(
        BoundLogger,
        structlog.get_logger(
            name, service_name=SERVICE_NAME, version=__version__, **initial_values
        ),
    )


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind ``kwargs`` to every event logged inside the block, tasks included."""
    with bound_contextvars(**kwargs):
        yield


__all__ = ["SERVICE_NAME", "configure_logging", "get_logger", "log_context"]
