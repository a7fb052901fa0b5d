from __future__ import annotations

import contextvars
import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4


_request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)
_mutation_action_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("mutation_action", default=None)

# Log fields stamped on every record emitted while the matching context is bound.
CONTEXT_FIELDS: dict[str, contextvars.ContextVar[Optional[str]]] = {
    "request_id": _request_id_var,
    "mutation_action": _mutation_action_var,
}

_configured_level: Optional[int] = None
_RESERVED_RECORD_KEYS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_request_id(value: Optional[str]) -> contextvars.Token:
    return _request_id_var.set(value)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_var.reset(token)


def new_request_id() -> str:
    return uuid4().hex


def get_mutation_action() -> Optional[str]:
    return _mutation_action_var.get()


def set_mutation_action(value: Optional[str]) -> contextvars.Token:
    return _mutation_action_var.set(value)


def reset_mutation_action(token: contextvars.Token) -> None:
    _mutation_action_var.reset(token)


def context_fields() -> dict[str, str]:
    return {name: value for name, var in CONTEXT_FIELDS.items() if (value := var.get())}


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, event name, bound context, then ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(context_fields())
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS and not key.startswith("_") and key not in payload
        }
        payload.update(extras)
        return json.dumps(payload, default=str, separators=(",", ":"))


def configure_logging(level: str = "INFO") -> None:
    global _configured_level
    resolved = getattr(logging, str(level).upper(), logging.INFO)
    if _configured_level == resolved:
        return

    root = logging.getLogger()
    root.setLevel(resolved)
    # API and CLI entry points share the same stdout JSON stream.
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    _configured_level = resolved


def request_log_fields(*, method: str, path: str, status_code: int, duration_ms: float, client_ip: Optional[str]) -> dict[str, object]:
    return {
        "method": method,
        "path": path,
        "status_code": int(status_code),
        "duration_ms": round(float(duration_ms), 2),
        "client_ip": client_ip or "",
    }


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0
