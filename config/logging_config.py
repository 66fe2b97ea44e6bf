"""
Logging setup for the ratings client.

LOG_LEVEL picks the root level (default INFO); LOG_JSON=1 switches the stdout
handler to one JSON object per line. Structured fields travel in
``extra={"extra": {...}}`` (the api layer attaches ``kind`` and ``status_code``).
Error details that may embed a response body are logged at DEBUG only.
"""
import json
import logging
import os
import sys
from typing import Optional

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Chatty at INFO: one line per request with the full URL (cursor included).
QUIET_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """One JSON object per record; structured `extra` fields are merged in when set."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            payload.update({k: v for k, v in fields.items() if v is not None and k not in payload})
        if record.exc_info and record.exc_info[0]:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _json_enabled() -> bool:
    return os.getenv("LOG_JSON", "").strip().lower() in ("1", "true", "yes")


def _resolve_level(level_name: Optional[str]) -> int:
    name = (level_name or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: Optional[str] = None) -> None:
    """Install a single stdout handler on the root logger; safe to call repeatedly."""
    level = _resolve_level(level_name)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter() if _json_enabled() else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
