# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for Cognito.

Every log entry is structured (JSON), timestamped, leveled, and carries the
source module. Training progress, checkpoint events and generation stats all
go through here; the only direct stdout writes in the codebase are the
streamed tokens of the interactive session.

How this works:
  - We use Python's standard `logging` module under the hood, but replace the
    default formatter with JsonFormatter, which serializes every log record
    into a single JSON line.
  - Log lines go to stderr so they never interleave with streamed model
    output on stdout. A file handler is attached when a path is given.
  - `get_logger` is the factory every module calls once at import time.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "cognito.training.engine.core", "msg": "Training step", "loss": 4.21}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each entry contains four mandatory fields:
      ts     - ISO 8601 UTC timestamp
      level  - log level name
      module - the logger name (usually the Python module path)
      msg    - the formatted message string

    Anything passed through `extra=` is merged in as additional context, and
    an attached exception is rendered under "exc".
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Level for loggers created without an explicit one. Updated by set_global_log_level.
_default_level_name: str = "INFO"


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Defaults to the
                   process-wide level (INFO until set_global_log_level runs).
        log_file: Optional path to a log file. If provided, logs go to both
                  stderr and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level if log_level is not None else _default_level_name)
    logger.setLevel(level)

    # Calling get_logger twice for the same name must not stack handlers.
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler(stream=sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def set_global_log_level(log_level: str) -> None:
    """
    Apply a level to every cognito logger created so far.

    Module loggers are built at import time with the default level; the CLI
    calls this once the config (or --log-level) is known.
    """
    global _default_level_name
    level = _resolve_log_level(log_level)
    _default_level_name = log_level.upper()
    for name, candidate in logging.Logger.manager.loggerDict.items():
        if not name.startswith("cognito") or not isinstance(candidate, logging.Logger):
            continue
        candidate.setLevel(level)
        for handler in candidate.handlers:
            handler.setLevel(level)
