"""
Structured Logger Implementation

Logger with key/value context, metric records and multiple backends.
Context values under secret-bearing keys are masked before any backend
or the standard logging tree can see them.
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from .interfaces import HFTLoggerInterface, LogBackend, LogRecord, LogLevel, LogType


REDACTED = "***"

SENSITIVE_CONTEXT_KEYS = frozenset({
    "secret",
    "api_secret",
    "secret_key",
    "signature",
    "api_sign",
    "token",
    "password",
    "private_key",
})

_PY_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


def redact_context(context: Dict[str, Any], extra_keys: Iterable[str] = ()) -> Dict[str, Any]:
    """Return a copy of ``context`` with secret-bearing values masked."""
    sensitive = SENSITIVE_CONTEXT_KEYS.union(k.lower() for k in extra_keys)
    return {
        key: (REDACTED if key.lower() in sensitive else value)
        for key, value in context.items()
    }


class HFTLogger(HFTLoggerInterface):
    """
    Structured logger dispatching records to backends synchronously.

    WARNING and above are also forwarded to the standard ``logging`` logger of
    the same name when ``propagate`` is set, so host applications see them.
    """

    def __init__(self, name: str, backends: List[LogBackend],
                 propagate: bool = True, redact_keys: Iterable[str] = (),
                 default_context: Optional[Dict[str, Any]] = None):
        self.name = name
        self.backends = backends
        self.propagate = propagate
        self._redact_keys = tuple(redact_keys)

        # Persistent context for all log messages
        self.context: Dict[str, Any] = dict(default_context or {})

        self._py_logger = logging.getLogger(name)

    def _dispatch(self, record: LogRecord) -> None:
        for backend in self.backends:
            if not backend.enabled or not backend.should_handle(record):
                continue
            try:
                backend.write(record)
            except Exception as e:
                if backend._handle_error(e):
                    self._py_logger.warning("Logging backend %s disabled after repeated errors: %s",
                                            backend.name, e)

    def _log(self, level: LogLevel, msg: str, log_type: LogType = LogType.TEXT, **context) -> None:
        full_context = redact_context({**self.context, **context}, self._redact_keys)

        record = LogRecord(
            timestamp=time.time(),
            level=level,
            log_type=log_type,
            logger_name=self.name,
            message=msg,
            context=full_context,
        )
        self._dispatch(record)

        if self.propagate and level >= LogLevel.WARNING:
            extra = f" {full_context}" if full_context else ""
            self._py_logger.log(_PY_LEVELS[level], str(msg) + extra)

    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, **context)

    def critical(self, msg: str, **context) -> None:
        self._log(LogLevel.CRITICAL, msg, **context)

    def metric(self, name: str, value: float, **tags) -> None:
        full_tags = redact_context({**self.context, **tags}, self._redact_keys)
        self._dispatch(LogRecord.create_metric(self.name, name, float(value), **full_tags))

    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        self.metric(f"{operation}_latency_ms", duration_ms, **tags)

    def counter(self, name: str, value: int = 1, **tags) -> None:
        self.metric(f"{name}_count", float(value), **tags)

    def audit(self, event: str, **context) -> None:
        self._log(LogLevel.INFO, event, LogType.AUDIT, **context)

    def set_context(self, **context) -> None:
        self.context.update(context)

    def flush(self) -> None:
        for backend in self.backends:
            backend.flush()


class LoggingTimer:
    """Context manager for timing operations with automatic latency logging."""

    def __init__(self, logger: HFTLoggerInterface, operation: str, **tags):
        self.logger = logger
        self.operation = operation
        self.tags = tags
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.end_time = time.perf_counter()
            duration_ms = (self.end_time - self.start_time) * 1000
            self.logger.latency(self.operation, duration_ms, **self.tags)

        if exc_type is not None:
            self.logger.error(f"{self.operation} failed",
                              error_type=exc_type.__name__,
                              **self.tags)

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        end_time = self.end_time or time.perf_counter()
        return (end_time - self.start_time) * 1000
