"""
Centralized structured logging configuration.
Import and call `setup_logging()` once at application startup.

The engine itself only ever calls `structlog.get_logger(__name__)`;
applications embedding it decide how events are rendered.
"""

import logging

import structlog

from jsonrescue.config import get_settings


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def setup_logging(level: int | str | None = None, json_output: bool | None = None) -> None:
    """
    Configure structlog for the embedding application.

    Args:
        level: Minimum log level (10=DEBUG, 20=INFO, 30=WARNING) or its name.
               Defaults to `RecoverySettings.log_level`.
        json_output: If True, emit machine-readable JSON logs (for production).
                     If False, emit human-readable colored console logs.
                     Defaults to `RecoverySettings.json_logs`.
    """
    if json_output is None:
        json_output = get_settings().json_logs

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_output:
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )
