"""Structured logging utilities for interview sessions."""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
from typing import Any

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

_logger = logging.getLogger("interview")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False

# Keys every interview event may carry at the top level of its JSON line.
EVENT_KEYS = ("outcome", "field", "error", "status", "path", "url", "ms")


def build_event(kind: str, session_id: str, **fields: Any) -> dict[str, Any]:
    event: dict[str, Any] = {"ts": round(time.time(), 3), "kind": kind, "session_id": session_id}
    extra: dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if key in EVENT_KEYS:
            event[key] = value
        else:
            extra[key] = value
    if extra:
        event["data"] = extra
    return event


class HumanFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(levelname)s %(name)s :: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def formatMessage(self, record: logging.LogRecord) -> str:
        event = getattr(record, "event", None)
        if event is not None:
            parts = [f"session={event['session_id']}", f"kind={event['kind']}"]
            parts += [f"{key}={event[key]}" for key in EVENT_KEYS if key in event]
            parts += [f"{key}={value}" for key, value in event.get("data", {}).items()]
            record.message = " ".join(parts)
        return super().formatMessage(record)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        event = getattr(record, "event", None) or {"ts": record.created, "message": record.getMessage()}
        return json.dumps({"level": record.levelname, **event}, ensure_ascii=False, default=str)


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    # stdout belongs to the tool result
    console = logging.StreamHandler(stream=sys.stderr)
    console.setFormatter(HumanFormatter())
    _logger.addHandler(console)

    if LOG_FILE:
        log_dir = os.path.dirname(LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        json_file = logging.handlers.RotatingFileHandler(
            LOG_FILE,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        json_file.setFormatter(JsonFormatter())
        _logger.addHandler(json_file)


def set_verbose(enabled: bool) -> None:
    """Switch request-level debug lines on or off."""

    _logger.setLevel(logging.DEBUG if enabled else LOG_LEVEL)


def log_event(kind: str, session_id: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit one event: a human line on stderr and, with ``LOG_FILE`` set, a JSON line."""

    _ensure_handlers()
    if not _logger.isEnabledFor(level):
        return
    event = build_event(kind, session_id, **fields)
    _logger.log(level, kind, extra={"event": event})


__all__ = ["EVENT_KEYS", "HumanFormatter", "JsonFormatter", "build_event", "log_event", "set_verbose"]
