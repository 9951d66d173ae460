"""
Structured logging with JSON output and correlation ids.

- JSON lines for production, a colored single-line format for development
- Correlation id and request context carried in context variables, so
  every record emitted while handling a request is tagged automatically
- Plain ``logging`` underneath: modules keep using ``logging.getLogger``
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
request_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar("request_context", default=None)

# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "asctime", "taskName",
})


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


def set_correlation_id(cid: Optional[str] = None) -> str:
    """
    Sets the correlation id of the current context.

    Args:
        cid: Existing id, or None to generate one

    Returns:
        The id that was set
    """
    cid = cid or str(uuid.uuid4())
    correlation_id.set(cid)
    return cid


def clear_correlation_id() -> None:
    correlation_id.set(None)


def get_request_context() -> Dict[str, Any]:
    return dict(request_context.get() or {})


def set_request_context(**kwargs) -> None:
    """Adds key-value pairs to the request context. None values are dropped."""
    current = get_request_context()
    current.update({k: v for k, v in kwargs.items() if v is not None})
    request_context.set(current)


def clear_request_context() -> None:
    request_context.set(None)


class StructuredFormatter(logging.Formatter):
    """
    Formats records as one JSON object per line.

    Fields: timestamp, level, logger, message, service, correlation_id,
    context, location, extra, exception.
    """

    def __init__(self, service_name: str = "logbook-line"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        cid = get_correlation_id()
        if cid:
            log_data["correlation_id"] = cid

        ctx = get_request_context()
        if ctx:
            log_data["context"] = ctx

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_data["stack_trace"] = self.formatStack(record.stack_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Single-line colored output for local development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%S"
        )
        color = self.COLORS.get(record.levelname, "")
        level = f"{color}{record.levelname:8}{self.RESET}"

        cid = get_correlation_id()
        cid_str = f"[{cid[:8]}] " if cid else ""

        line = f"{timestamp} {level} {cid_str}{record.name}: {record.getMessage()}"

        ctx = get_request_context()
        if ctx:
            line += " | " + " | ".join(f"{k}={v}" for k, v in ctx.items())

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    service_name: str = "logbook-line",
) -> None:
    """
    Installs a single stdout handler on the root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_output: True for JSON lines, False for human-readable output
        service_name: Value of the ``service`` field
    """
    if json_output:
        formatter: logging.Formatter = StructuredFormatter(service_name=service_name)
    else:
        formatter = HumanReadableFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)
    root_logger.addHandler(handler)

    # Third-party noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
