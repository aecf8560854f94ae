"""Structured logging for ascom-facade.

Builds on Python's standard logging module with:
- Keyword arguments on log calls become structured key-value data
- Per-device context (device type, number, client id) via LogContext
- Human-readable or JSON formatting
- A LogSink boundary for hosts that collect (severity, component,
  message) triples instead of log records

Security Note:
    Values reported by a remote device (error messages, names) are
    untrusted. Pass them as keyword arguments, never format them into
    the message string:

    # SAFE
    logger.warning("Device error", error_message=envelope.error_message)
    # UNSAFE
    logger.warning(f"Device error {envelope.error_message}")

Example:
    logger = get_logger(__name__)

    with LogContext(device_type="camera", device_number=0, client_id=7):
        logger.info("Exposure started", duration=2.5)

    # Forward every record to a host application's sink
    install_log_sink(lambda: host_sink)
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, Protocol, cast, runtime_checkable

#: Name of the package root logger. All module loggers live below it.
ROOT_LOGGER_NAME = "ascom_facade"

_log_context: contextvars.ContextVar[Mapping[str, Any]] = contextvars.ContextVar(
    "ascom_facade_log_context", default={}
)

#: Keyword arguments the stdlib Logger._log signature understands.
_LOGGING_KWARGS = frozenset({"exc_info", "extra", "stack_info", "stacklevel"})


# =============================================================================
# Structured Logger
# =============================================================================


class StructuredLogger(logging.Logger):
    """Logger accepting arbitrary keyword arguments as structured data.

    The standard level methods (debug, info, ...) forward their keyword
    arguments to ``_log``; everything that is not a stdlib logging
    keyword is collected into ``record.structured_data`` together with
    the active LogContext values.

    Usage:
        logger = get_logger("ascom_facade.transport")
        logger.debug("PUT", url=url, transaction=42)
    """

    def _log(  # type: ignore[override]
        self,
        level: int,
        msg: object,
        args: Any,
        **kwargs: Any,
    ) -> None:
        """Split logging keywords from structured data and emit the record.

        Merge order is context first, then explicit keywords, so a call
        can override an ambient value such as ``device_number``.

        Args:
            level: Numeric log level.
            msg: Log message, may contain % placeholders.
            args: Arguments for % formatting.
            **kwargs: stdlib keywords (exc_info, extra, stack_info,
                stacklevel) plus any structured key-value pairs.
        """
        std = {k: v for k, v in kwargs.items() if k in _LOGGING_KWARGS}
        data = {k: v for k, v in kwargs.items() if k not in _LOGGING_KWARGS}
        extra = dict(std.pop("extra", None) or {})
        extra["structured_data"] = {**_log_context.get(), **data}
        std["stacklevel"] = std.get("stacklevel", 1) + 1
        super()._log(level, msg, args, extra=extra, **std)


# =============================================================================
# Formatters
# =============================================================================


def _format_value(value: Any) -> str:
    """Render one structured value for the key=value formatter.

    Example:
        >>> _format_value(None)
        'null'
        >>> _format_value("two words")
        '"two words"'
        >>> _format_value([1, 2])
        '[1, 2]'
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        return f'"{value}"' if " " in value else value
    if isinstance(value, dict | list | tuple):
        return json.dumps(value, default=str)
    return str(value)


class StructuredFormatter(logging.Formatter):
    """Human-readable formatter: ``<base format> | key=value key=value``."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        include_structured: bool = True,
    ) -> None:
        super().__init__(
            fmt or "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt
        )
        self.include_structured = include_structured

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        structured = getattr(record, "structured_data", None)
        if not self.include_structured or not structured:
            return base
        pairs = " ".join(f"{k}={_format_value(v)}" for k, v in structured.items())
        return f"{base} | {pairs}"


class JSONFormatter(logging.Formatter):
    """One JSON object per line with structured data as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "structured_data", {}))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


# =============================================================================
# Context Management
# =============================================================================


class LogContext:
    """Context manager adding key-value pairs to every record inside it.

    Contexts nest; inner values override outer ones with the same key.
    Backed by contextvars so concurrent threads keep separate contexts.

    Example:
        >>> with LogContext(device_type="switch", device_number=0):
        ...     with LogContext(member="getswitchvalue"):
        ...         logger.debug("GET")  # carries all three keys
    """

    def __init__(self, **kwargs: Any) -> None:
        self._kwargs = kwargs
        self._token: contextvars.Token[Mapping[str, Any]] | None = None

    def __enter__(self) -> LogContext:
        self._token = _log_context.set({**_log_context.get(), **self._kwargs})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    def __repr__(self) -> str:
        return f"LogContext({self._kwargs!r})"


def current_context() -> dict[str, Any]:
    """Return a copy of the active logging context."""
    return dict(_log_context.get())


# =============================================================================
# Log Sink Boundary
# =============================================================================


@runtime_checkable
class LogSink(Protocol):
    """Receiver of leveled text messages from the facade layer.

    Hosts that already own a trace facility implement this protocol and
    install it with install_log_sink(). Severity is the logging level
    name (``"DEBUG"``, ``"INFO"``, ...) and component is the logger name.
    """

    def log(self, severity: str, component: str, message: str) -> None:
        """Record one message."""
        ...  # pragma: no cover


class LogSinkHandler(logging.Handler):
    """Handler forwarding records to a LogSink.

    The sink is looked up through a getter on every record so it can be
    installed or replaced at runtime; a getter returning None makes the
    handler a no-op. A thread-local guard drops records emitted while the
    sink itself is logging.
    """

    _local = threading.local()

    def __init__(
        self,
        sink_getter: Callable[[], LogSink | None],
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self._get_sink = sink_getter

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "emitting", False):
            return
        try:
            self._local.emitting = True
            sink = self._get_sink()
            if sink is None:
                return
            message = record.getMessage()
            structured = getattr(record, "structured_data", None)
            if structured:
                pairs = " ".join(
                    f"{k}={_format_value(v)}" for k, v in structured.items()
                )
                message = f"{message} | {pairs}"
            sink.log(record.levelname, record.name, message)
        except Exception:
            self.handleError(record)
        finally:
            self._local.emitting = False


# =============================================================================
# Configuration
# =============================================================================

_configured = False
_config_lock = threading.Lock()
_sink_handler: LogSinkHandler | None = None


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: Any = None,
    include_structured: bool = True,
    force: bool = False,
) -> None:
    """Configure the ``ascom_facade`` logger hierarchy.

    Idempotent: later calls are ignored unless ``force`` is set, in which
    case existing handlers are removed first. Thread-safe.

    Args:
        level: Minimum level, as an int or a level name.
        json_format: Emit NDJSON instead of key=value text.
        stream: Output stream, sys.stderr by default.
        include_structured: Append structured data in text mode.
        force: Reconfigure even if already configured.

    Example:
        >>> import io
        >>> buffer = io.StringIO()
        >>> configure_logging(level="DEBUG", stream=buffer, force=True)
    """
    with _config_lock:
        if force:
            _reset_logging_impl()
        _configure_logging_impl(level, json_format, stream, include_structured)


def _configure_logging_impl(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: Any = None,
    include_structured: bool = True,
) -> None:
    """Body of configure_logging; caller holds the lock."""
    global _configured
    if _configured:
        return

    logging.setLoggerClass(StructuredLogger)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    formatter: logging.Formatter
    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = StructuredFormatter(include_structured=include_structured)
    handler.setFormatter(formatter)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.addHandler(handler)
    root.propagate = False
    _configured = True


def _reset_logging_impl() -> None:
    """Body of reset_logging; caller holds the lock."""
    global _configured, _sink_handler
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    _sink_handler = None
    _configured = False


def reset_logging() -> None:
    """Remove all package handlers and mark logging unconfigured (tests)."""
    with _config_lock:
        _reset_logging_impl()


def install_log_sink(
    sink_getter: Callable[[], LogSink | None],
    level: int = logging.NOTSET,
) -> LogSinkHandler:
    """Attach a LogSinkHandler to the package logger, replacing any previous one.

    Args:
        sink_getter: Callable returning the current sink, or None.
        level: Minimum level forwarded to the sink.

    Returns:
        The installed handler.
    """
    global _sink_handler
    get_logger(ROOT_LOGGER_NAME)
    with _config_lock:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        if _sink_handler is not None:
            root.removeHandler(_sink_handler)
        _sink_handler = LogSinkHandler(sink_getter, level)
        root.addHandler(_sink_handler)
        return _sink_handler


def get_logger(name: str) -> StructuredLogger:
    """Return a StructuredLogger, configuring defaults on first use.

    Args:
        name: Logger name, normally ``__name__``.

    Returns:
        Logger accepting structured keyword arguments.
    """
    if not _configured:
        with _config_lock:
            if not _configured:  # pragma: no branch
                _configure_logging_impl()
    return cast(StructuredLogger, logging.getLogger(name))
