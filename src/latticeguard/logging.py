"""
LatticeGuard Structured Logging Configuration.

Provides consistent logging across all LatticeGuard components with:
- Structured JSON output for production
- Human-readable output for development
- Request ID correlation
- Sensitive data filtering (key material never reaches a log line)

Usage:
    from latticeguard.logging import get_logger, configure_logging

    # At application startup
    configure_logging(level="INFO", json_format=True)

    # In modules
    logger = get_logger(__name__)
    logger.info("Generated key pair", extra={"key_tag": "abc123"})
"""

import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Sensitive field patterns to filter from logs
SENSITIVE_PATTERNS = frozenset(
    {
        "secret",
        "private_key",
        "privatekey",
        "secret_key",
        "secretkey",
        "seed",
        "noise",
        "error_poly",
        "plaintext",
        "password",
        "token",
    }
)

_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)


def _is_sensitive_key(key: str) -> bool:
    """Check if a key name suggests sensitive data."""
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in SENSITIVE_PATTERNS)


def _filter_sensitive(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively filter sensitive values from a dictionary."""
    if not isinstance(data, dict):
        return data

    filtered = {}
    for key, value in data.items():
        if _is_sensitive_key(key):
            filtered[key] = "[REDACTED]"
        elif isinstance(value, dict):
            filtered[key] = _filter_sensitive(value)
        elif isinstance(value, list):
            filtered[key] = [_filter_sensitive(item) if isinstance(item, dict) else item for item in value]
        else:
            filtered[key] = value
    return filtered


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            log_data["location"] = {
                "file": record.pathname.split("/")[-1],
                "line": record.lineno,
                "function": record.funcName,
            }

        # Add extra fields (filtered for sensitive data)
        extra_fields = {}
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if _is_sensitive_key(key):
                extra_fields[key] = "[REDACTED]"
            elif isinstance(value, dict):
                extra_fields[key] = _filter_sensitive(value)
            else:
                extra_fields[key] = value

        context = LogContext.get_current()
        if context:
            extra_fields.update(_filter_sensitive(context))

        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET if color else ""

        timestamp = datetime.now(timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        level = f"{color}{record.levelname:8}{reset}"
        name = record.name.split(".")[-1][:15].ljust(15)
        message = record.getMessage()

        request_id = getattr(record, "request_id", None) or LogContext.get_current().get("request_id")
        if request_id:
            message = f"[{request_id[:8]}] {message}"

        formatted = f"{timestamp} {level} {name} {message}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def configure_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    stream: Any = None,
) -> None:
    """
    Configure logging for LatticeGuard components.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: LG_LOG_LEVEL
        json_format: Use JSON output. Default: True in production, False otherwise
        stream: Output stream. Default: sys.stderr
    """
    from .config import settings

    if level is None:
        level = settings.LOG_LEVEL
    if json_format is None:
        env = os.environ.get("LG_ENVIRONMENT", settings.ENVIRONMENT)
        json_format = env == "production"

    root_logger = logging.getLogger("latticeguard")
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root_logger.addHandler(handler)
    root_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a LatticeGuard module.

    Usage:
        logger = get_logger(__name__)
        logger.info("Message", extra={"request_id": "123"})
    """
    if not name.startswith("latticeguard"):
        name = f"latticeguard.{name}"
    return logging.getLogger(name)


# Per thread and per asyncio task
_CURRENT_CONTEXT: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("latticeguard_log_context")


class LogContext:
    """
    Context manager for adding correlation IDs to logs.

    The context is local to the current thread (and asyncio task), so values
    set in one thread never appear on another thread's log lines.

    Usage:
        with LogContext(request_id="abc123"):
            logger.info("Encrypting")  # Automatically includes request_id
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "LogContext":
        self._token = _CURRENT_CONTEXT.set({**LogContext.get_current(), **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _CURRENT_CONTEXT.reset(self._token)
            self._token = None

    @classmethod
    def get_current(cls) -> Dict[str, Any]:
        """Get the current logging context."""
        return dict(_CURRENT_CONTEXT.get({}))


if not logging.getLogger("latticeguard").handlers:
    configure_logging()


__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
    "StructuredFormatter",
    "DevelopmentFormatter",
]
