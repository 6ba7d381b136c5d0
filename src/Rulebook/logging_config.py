"""
Structured Logging Utilities

Configures the ``Rulebook`` package logger with either a plain console
formatter or a JSON-lines formatter.  Core operations never touch this
module; they accept an optional logger and default to their module logger.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Optional, Union

from .settings import LogFormat, LogLevel

__all__ = ["LOGGER_NAME", "JSONFormatter", "setup_logging"]

LOGGER_NAME = "Rulebook"


class JSONFormatter(logging.Formatter):
    """Formatter emitting JSON structured logs.

    Examples:
        >>> formatter = JSONFormatter()
        >>> isinstance(formatter.format(logging.makeLogRecord({'msg': 'test'})), str)
        True
    """

    def format(self, record: logging.LogRecord) -> str:
        """Serialize a logging record into a JSON line."""

        now = datetime.now(timezone.utc)
        log_obj = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            log_obj.update(record.extra_fields)
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


def setup_logging(
    level: Union[LogLevel, str] = LogLevel.WARNING,
    log_format: Union[LogFormat, str] = LogFormat.CONSOLE,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Configure the package logger.

    Handlers installed by earlier calls are replaced, so the function can be
    called once per CLI invocation.

    Args:
        level: Minimum level to emit.
        log_format: ``console`` for ``LEVEL: message`` lines, ``json`` for
            JSON objects.
        stream: Target stream; defaults to ``sys.stderr``.

    Returns:
        The configured ``Rulebook`` logger.
    """

    level_name = LogLevel(str(getattr(level, "value", level)).upper()).value
    log_format = LogFormat(getattr(log_format, "value", log_format))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level_name, logging.WARNING))

    for handler in list(logger.handlers):
        if getattr(handler, "_rulebook_managed", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format is LogFormat.JSON:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler._rulebook_managed = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False

    return logger
