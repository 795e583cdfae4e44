"""Structured logging for secrets-fetch.

Provides structured logging on top of structlog with per-operation context
(operation name, request id, API host). Output goes to the console, to JSON,
or both, with optional size-based file rotation.

Secrets and tokens are redacted before rendering: any event key that looks
sensitive (``token``, ``secret``, ``authorization``...) is replaced with
``[REDACTED]``.

Example usage:
    from secrets_fetch.core.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", format="console")

    logger = get_logger("api")
    logger.info("request_sent", method="GET")

    ctx = OperationContext(operation="secrets_fetch", api_host="api.doppler.com")
    with with_context(ctx):
        logger.info("attempt_failed")  # Includes operation, request_id, api_host
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Sensitive field patterns that should never be logged
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "token",
    "secret",
    "password",
    "credential",
    "bearer",
    "authorization",
})

REDACTED = "[REDACTED]"


@dataclass(frozen=True)
class OperationContext:
    """Immutable context correlating all log entries of one API call.

    Attributes:
        operation: Name of the API operation (e.g., "secrets_fetch").
        request_id: Unique id for this call, shared by every attempt.
        api_host: Doppler API host the call targets.
    """

    operation: str
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    api_host: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging (excludes None values)."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "request_id": self.request_id,
        }
        if self.api_host is not None:
            result["api_host"] = self.api_host
        return result


# ContextVar keeps concurrent calls isolated from each other
_current_context: ContextVar[OperationContext | None] = ContextVar(
    "secrets_fetch_context", default=None
)


def get_current_context() -> OperationContext | None:
    """Get the current OperationContext if set."""
    return _current_context.get()


@contextmanager
def with_context(ctx: OperationContext) -> Iterator[OperationContext]:
    """Set the OperationContext for the duration of a block.

    Args:
        ctx: The OperationContext to use for the block.

    Yields:
        The OperationContext that was set.
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def _sanitize_value(key: str, value: Any) -> Any:
    """Return "[REDACTED]" if the key looks sensitive, else the value."""
    key_lower = key.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in key_lower:
            return REDACTED
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that redacts sensitive fields.

    Nested dicts are sanitized one level deep.
    """
    sanitized: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            sanitized[key] = {
                k: _sanitize_value(k, v) for k, v in value.items()
            }
        else:
            sanitized[key] = _sanitize_value(key, value)
    return sanitized


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds an ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds OperationContext fields.

    Explicitly bound fields take precedence over context fields.
    """
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            if key not in event_dict:
                event_dict[key] = value
    return event_dict


class ClientLogger:
    """Component logger wrapping structlog.

    The underlying structlog logger is fetched on every call so that loggers
    created at import time still honour a later ``configure_logging()``.
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger().bind(**self._context)
        return logger

    def bind(self, **context: Any) -> ClientLogger:
        """Create a new logger with additional bound context."""
        return ClientLogger(
            self._component,
            **{k: v for k, v in self._context.items() if k != "component"},
            **context,
        )

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._get_logger().error(event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log an exception with traceback; call from an exception handler."""
        self._get_logger().exception(event, **kw)


def _get_processors(
    include_timestamps: bool,
    include_context: bool,
) -> list[Processor]:
    """Build the shared structlog processor chain.

    Rendering is left to each handler's ``ProcessorFormatter``.
    """
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,  # Filter before processing
        structlog.stdlib.add_log_level,
    ]

    if include_context:
        processors.append(_add_context)

    # Redact after context is merged so bound fields are covered too
    processors.append(_sanitize_event_dict)

    if include_timestamps:
        processors.append(_add_timestamp)

    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ])

    return processors


def _make_formatter(renderer: Processor) -> structlog.stdlib.ProcessorFormatter:
    """Wrap a structlog renderer as a stdlib formatter for one handler."""
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console", "both"] = "console",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 50,
    backup_count: int = 5,
    include_timestamps: bool = True,
    include_context: bool = True,
) -> None:
    """Configure structured logging.

    Call once at startup before any logging occurs.

    Args:
        level: Minimum log level to capture.
        format: "json" for structured, "console" for human-readable, "both" for
            console to stderr and JSON to file (requires file_path).
        file_path: Optional log file; rotated by size.
        max_file_size_mb: Maximum log file size before rotation (MB).
        backup_count: Number of rotated log files to keep.
        include_timestamps: Whether to include ISO8601 timestamps.
        include_context: Whether to include OperationContext fields.

    Raises:
        ValueError: If format="both" but file_path is not provided.
    """
    if format == "both" and file_path is None:
        raise ValueError("file_path is required when format='both'")

    log_level = getattr(logging, level)
    handlers: list[logging.Handler] = []
    console_formatter = _make_formatter(structlog.dev.ConsoleRenderer(colors=True))
    json_formatter = _make_formatter(structlog.processors.JSONRenderer())

    if format in ("console", "both"):
        # stdout is reserved for command output
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    if format in ("json", "both"):
        if file_path:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_file_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(json_formatter)
            handlers.append(file_handler)
        else:
            json_handler = logging.StreamHandler(sys.stderr)
            json_handler.setLevel(log_level)
            json_handler.setFormatter(json_formatter)
            handlers.append(json_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)

    # cache_logger_on_first_use=False so import-time loggers pick up this config
    structlog.configure(
        processors=_get_processors(include_timestamps, include_context),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str, **initial_context: Any) -> ClientLogger:
    """Get a logger bound to a component name (e.g., "api", "retry")."""
    return ClientLogger(component, **initial_context)


__all__ = [
    "ClientLogger",
    "OperationContext",
    "REDACTED",
    "SENSITIVE_PATTERNS",
    "configure_logging",
    "get_current_context",
    "get_logger",
    "with_context",
]
