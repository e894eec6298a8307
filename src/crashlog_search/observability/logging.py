"""Structured JSON logging with operation and trace correlation."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import IO, Any

import orjson

from crashlog_search.observability.context import get_log_context


# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _clip(value: str, limit: int) -> str:
    return value if len(value) <= limit else f"{value[:limit]}..."


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _to_json(value: Any) -> Any:
    """orjson fallback for values it cannot serialize natively."""
    if isinstance(value, (set, frozenset)):
        items = list(value)
        try:
            return sorted(items)
        except TypeError:
            return items
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (Path, BaseException)):
        return str(value)
    return repr(value)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, stamped with the current log context.

    String values are clipped and secret-looking keys are redacted.
    """

    REDACT_KEYS = frozenset({"password", "token", "api_key", "secret", "authorization", "cookie", "session"})
    MAX_MESSAGE_LEN = 2000
    MAX_VALUE_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
        }
        _, dot, component = record.name.rpartition(".")
        if dot:
            entry["component"] = component

        entry.update(self._sanitize(get_log_context()))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        extras = {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS and key[:1] != "_"}
        entry.update(self._sanitize(extras))
        return orjson.dumps(entry, default=_to_json).decode("utf-8")

    def _sanitize(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        clean: dict[str, Any] = {}
        for key, value in fields.items():
            if key.lower() in self.REDACT_KEYS:
                clean[key] = "[REDACTED]"
            elif isinstance(value, str):
                clean[key] = _clip(value, self.MAX_VALUE_LEN)
            else:
                clean[key] = value
        return clean


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: Mapping[str, str] | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Install a single stream handler on the root logger.

    ``stream`` defaults to stderr so CLI output on stdout stays parseable.
    ``logger_levels`` maps logger names to level names for per-logger tuning.
    Unknown level names fall back to INFO.
    """
    root = logging.getLogger()
    root.setLevel(_level(level))
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_level(name_level))
