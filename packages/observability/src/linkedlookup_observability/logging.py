from __future__ import annotations

import json
import logging
import os
import pathlib
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any

from linkedlookup_observability.context import bind, connector, request_id, service


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _local_time_short() -> str:
    return datetime.now().strftime("%H:%M:%S")


SENSITIVE_KEYS = {
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
    "cookie",
}

CONTEXT_KEYS = ("request_id", "service", "connector")


def _redact_key_value(k: str, v: Any) -> Any:
    key = (k or "").lower()
    if key in SENSITIVE_KEYS:
        return "***REDACTED***"
    return v


def _max_log_string_len() -> int:
    raw = os.getenv("LOG_MAX_STRING")
    if raw is None or not raw.strip():
        return 2000
    try:
        return int(raw)
    except ValueError:
        return 2000


def _clamp_string(s: str, max_len: int | None = None) -> str:
    limit = _max_log_string_len() if max_len is None else max_len
    if limit <= 0 or len(s) <= limit:
        return s
    return s[:limit] + "...(truncated)"


def _to_jsonable(value: Any) -> Any:
    """
    Convert values into JSON-friendly types; upstream payloads can be large.
    """
    if value is None or isinstance(value, (int, float, bool)):
        return value
    if isinstance(value, str):
        return _clamp_string(value)
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            ks = str(k)
            out[ks] = _to_jsonable(_redact_key_value(ks, v))
        return out
    if isinstance(value, (list, tuple, set)):
        return [_to_jsonable(v) for v in value]
    return _clamp_string(str(value), max_len=2000)


class ContextFilter(logging.Filter):
    """
    Attach correlation fields to every log record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id.get()
        record.service = service.get()
        if getattr(record, "connector", None) is None:
            record.connector = connector.get()
        return True


LOGRECORD_BUILTIN_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
}


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    extras: dict[str, Any] = {}
    for k, v in record.__dict__.items():
        if k in LOGRECORD_BUILTIN_KEYS or k in CONTEXT_KEYS:
            continue
        extras[k] = _to_jsonable(_redact_key_value(k, v))
    return extras


class JsonFormatter(logging.Formatter):
    """
    JSON formatter (best for production).
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": _utc_iso(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": getattr(record, "service", None),
            "request_id": getattr(record, "request_id", None),
            "connector": getattr(record, "connector", None),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        extras = _extras(record)
        if extras:
            payload["extra"] = extras
        return json.dumps(payload, ensure_ascii=False)


class PrettyFormatter(logging.Formatter):
    """
    Pretty formatter for local dev.
    """

    def format(self, record: logging.LogRecord) -> str:
        ts = _local_time_short()
        base = (
            f"{ts} "
            f"[{record.levelname}] "
            f"svc={getattr(record, 'service', None)} "
            f"req={getattr(record, 'request_id', None)} "
            f"connector={getattr(record, 'connector', None)} "
            f"{record.name}: {record.getMessage()}"
        )
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        extras = _extras(record)
        if extras:
            base += f" extra={extras}"
        return base


def setup_logging(app_service_name: str, *, level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure logging once per process.
    Safe to call multiple times (idempotent).

    Supports:
    - Console logging (pretty or json), chosen by LOG_FORMAT unless given
    - Optional file logging (RotatingFileHandler) if LOG_FILE_PATH is set
    """
    root = logging.getLogger()

    if getattr(root, "_configured_by_linkedlookup", False):
        bind(service=app_service_name)
        return

    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved_level = getattr(logging, level_name, logging.INFO)
    fmt = (log_format or os.getenv("LOG_FORMAT") or "pretty").lower()

    root.setLevel(resolved_level)
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(ContextFilter())
    console_handler.setFormatter(JsonFormatter() if fmt == "json" else PrettyFormatter())
    root.addHandler(console_handler)

    log_file_path = (os.getenv("LOG_FILE_PATH") or "").strip()
    if log_file_path:
        path = pathlib.Path(log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        max_bytes = int((os.getenv("LOG_FILE_MAX_BYTES") or "10485760").strip())
        backup_count = int((os.getenv("LOG_FILE_BACKUP_COUNT") or "5").strip())
        file_handler = RotatingFileHandler(
            filename=str(path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.addFilter(ContextFilter())
        file_handler.setFormatter(JsonFormatter())
        root.addHandler(file_handler)

    # httpx logs every request at INFO; the connectors already do.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    for name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    bind(service=app_service_name)
    root._configured_by_linkedlookup = True  # type: ignore[attr-defined]

    logging.getLogger(__name__).info(
        "logging_initialized",
        extra={
            "log_level": level_name,
            "log_format": fmt,
            "file_logging_enabled": bool(log_file_path),
        },
    )


def bind_log_context(*, request_id_value: str | None = None, connector_value: str | None = None) -> None:
    """Bind only the given correlation fields; others keep their current value."""
    fields: dict[str, str | None] = {}
    if request_id_value is not None:
        fields["request_id"] = request_id_value
    if connector_value is not None:
        fields["connector"] = connector_value
    bind(**fields)
