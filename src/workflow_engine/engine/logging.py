"""JSON log lines for the engine, the server and the CLI.

Each record becomes one JSON object on stderr. Context passed through
``logger.info(..., extra={...})`` (instance ids, action ids, error kinds) is
collected under an ``extra`` key.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

# Built from a blank record so new interpreter attributes (e.g. taskName) are covered.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


def _context_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        line: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = _context_fields(record)
        if context:
            line["extra"] = context
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)

        # Datetimes and enums in context fall back to str().
        return json.dumps(line, ensure_ascii=False, default=str)


def configure_logging(level: str) -> None:
    """Route all logging through a single JSON handler at ``level``.

    Stdout is left to command output such as `simulate`'s instance JSON.
    """

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    # uvicorn logs every request at INFO; never let it drop to DEBUG with us.
    logging.getLogger("uvicorn.access").setLevel(max(root.level, logging.INFO))
