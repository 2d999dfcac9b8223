"""Structlog setup for hunkstage.

Library modules get their logger from ``get_logger``. Nothing is printed
until ``configure_logging`` attaches a handler to the ``hunkstage`` logger;
the root logger of the host application is left alone.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import structlog

from hunkstage.config import load_config


ROOT_LOGGER_NAME = "hunkstage"

# Longest git stderr/stdin excerpt kept in a log event
MAX_OUTPUT_CHARS = 2000


def get_logger(name: str) -> Any:
    """Return a logger for a hunkstage module.

    Events carry a ``component`` field with the module's short name
    (``runner``, ``apply``, ...).

    Args:
        name: The module's ``__name__``.
    """
    # Initial values instead of bind(): binding here would freeze the
    # configuration in effect at import time
    return structlog.get_logger(name, component=name.rsplit(".", 1)[-1])


def _shorten_git_output(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Truncate captured git output so a failing command cannot flood the log."""
    for key in ("stderr", "stdout", "patch"):
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > MAX_OUTPUT_CHARS:
            omitted = len(value) - MAX_OUTPUT_CHARS
            event_dict[key] = f"{value[:MAX_OUTPUT_CHARS]}... [{omitted} more characters]"
    return event_dict


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    # Colors only when a person is watching
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Route hunkstage's structlog events to stderr.

    Args:
        level: Log level name; defaults to the configured ``log_level``.
        fmt: ``console`` or ``json``; defaults to the configured ``log_format``.

    Raises:
        ConfigError: If a value has to be read from an invalid configuration.
    """
    if level is None or fmt is None:
        config = load_config()
        level = level or config.log_level
        fmt = fmt or config.log_format

    log_level = getattr(logging, level.upper(), logging.WARNING)

    pre_chain = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _shorten_git_output,
    ]

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars]
        + pre_chain
        + [
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=_renderer(fmt), foreign_pre_chain=pre_chain)
    )

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    # Repeated calls (one per CLI invocation in tests) replace the handler
    package_logger.handlers = [handler]
    package_logger.setLevel(log_level)
    package_logger.propagate = False
