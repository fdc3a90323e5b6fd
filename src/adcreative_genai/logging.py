"""
Logging setup shared by the pipeline, the API and the CLI.

Two formatters:
- a compact human-readable one for local runs
- a JSON one for deployments that ship logs somewhere structured

Credential values never reach the log: the dispatcher only logs key positions,
and the JSON formatter redacts any extra whose key looks secret.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

SENSITIVE_KEY_TOKENS = ("password", "secret", "token", "api_key", "apikey", "authorization")

_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(token in lowered for token in SENSITIVE_KEY_TOKENS)


def _sanitize(key: str, value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: "***REDACTED***" if _is_sensitive_key(str(k)) else _sanitize(str(k), v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_sanitize(key, item) for item in value]
    if isinstance(value, str) and _is_sensitive_key(key):
        return "***REDACTED***"
    return value


class StructuredFormatter(logging.Formatter):
    """JSON formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        # Anything passed via logger.info(..., extra={...}).
        extra = {
            k: v
            for k, v in vars(record).items()
            if k not in _STANDARD_ATTRS and not k.startswith("_") and not callable(v)
        }
        if extra:
            log_data["extra"] = _sanitize("extra", extra)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        line = f"{timestamp} {record.levelname:8s} {record.name:32s} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    root = logging.getLogger("adcreative_genai")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter() if json_format else DevelopmentFormatter())

    # Re-running setup (tests, reloads) replaces our handler instead of stacking.
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    if not name.startswith("adcreative_genai"):
        name = f"adcreative_genai.{name}"
    return logging.getLogger(name)
