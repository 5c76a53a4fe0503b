"""
Application logging.

Console output is one line per record; file output (when LOG_DIR is set) is
one JSON object per line, with a separate file that only receives errors.
Loggers named `stocklist.*` propagate into these handlers.
"""
import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from fastapi import Request

SERVICE_NAME = "inventory-system"

logger = logging.getLogger("stocklist")

SENSITIVE_KEYS = {"password", "token", "authorization", "secret", "api_key"}

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _extras(record: logging.LogRecord) -> dict:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED}


class SingleLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        line = f"[{ts}] [{record.levelname.lower()}] [{SERVICE_NAME}] {record.getMessage()}"
        meta = _extras(record)
        if meta:
            line += " | " + json.dumps(meta, default=str).replace("\n", " ")
        if record.exc_info:
            line += " | " + " ".join(self.formatException(record.exc_info).splitlines())
        return line


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            payload["stack"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> logging.Logger:
    """Attach console (and optionally rotating file) handlers to the app logger."""
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    logger.propagate = False

    # Prevent adding handlers multiple times (reload, tests)
    if logger.handlers:
        return logger

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(SingleLineFormatter())
    logger.addHandler(console)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)

        combined = RotatingFileHandler(
            path / "combined.log", maxBytes=20 * 1024 * 1024, backupCount=14, encoding="utf-8"
        )
        combined.setFormatter(JsonLineFormatter())
        logger.addHandler(combined)

        errors = RotatingFileHandler(
            path / "error.log", maxBytes=20 * 1024 * 1024, backupCount=30, encoding="utf-8"
        )
        errors.setLevel(logging.ERROR)
        errors.setFormatter(JsonLineFormatter())
        logger.addHandler(errors)

    return logger


def sanitize(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: ("[REDACTED]" if str(k).lower() in SENSITIVE_KEYS else sanitize(v))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [sanitize(v) for v in value]
    return value


def safe_extra(meta: dict) -> dict:
    """Sanitize `meta` and rename keys that would clash with LogRecord attributes."""
    out = {}
    for k, v in sanitize(meta).items():
        key = str(k)
        out[f"ctx_{key}" if key in _RESERVED else key] = v
    return out


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def request_details(request: Request) -> dict:
    return {
        "method": request.method,
        "url": str(request.url.path),
        "params": dict(request.path_params),
        "query": dict(request.query_params),
        "ip": client_ip(request),
        "username": request.headers.get("x-username") or "unknown",
        "userAgent": request.headers.get("user-agent"),
    }


def log_api_request(request: Request, message: str, **meta) -> None:
    logger.info(message, extra=safe_extra({**request_details(request), **meta}))


def log_api_error(request: Request, exc: BaseException, message: str, **meta) -> None:
    logger.error(
        message,
        extra={
            **request_details(request),
            **safe_extra(meta),
            "error": repr(exc),
            "stack": " ".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).replace("\n", " "),
        },
    )


def log_db_operation(operation: str, **details) -> None:
    logger.debug(f"Database {operation}", extra=safe_extra(details))


def log_system_event(message: str, **meta) -> None:
    logger.info(message, extra=safe_extra(meta))
