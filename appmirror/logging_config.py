"""
Logging setup for appmirror runs.

``LOG_FORMAT=json`` emits one JSON object per line for CI logs;
the default ``text`` format is meant for a terminal. ``LOG_LEVEL``
picks the threshold (default INFO).

Per-app lines pass their context through ``extra``:

    logger.info("Fetched config", extra={"app": "immich", "mode": "import"})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Record attributes set via ``extra`` by the mirror manager
CONTEXT_FIELDS = ("app", "mode")

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with any app context attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (name, getattr(record, name))
            for name in CONTEXT_FIELDS
            if hasattr(record, name)
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class HumanFormatter(logging.Formatter):
    """
    Terminal output, e.g.::

        12:34:56 WARNING [manager        ] (immich) Upstream compose unavailable
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:7}"
        if self.color and record.levelno in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelno]}{level}{self.RESET}"

        source = record.name.rsplit(".", 1)[-1][:15]
        app = getattr(record, "app", None)
        prefix = f"({app}) " if app else ""

        line = f"{datetime.now():%H:%M:%S} {level} [{source:15}] {prefix}{record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: str | None = None, format_type: str | None = None) -> None:
    """Configure the root logger once at CLI start-up; arguments override the env."""
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    fmt = (format_type or os.environ.get("LOG_FORMAT", "text")).lower()
    numeric_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(HumanFormatter(color=sys.stderr.isatty()))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured: level={level_name}, format={fmt}")
