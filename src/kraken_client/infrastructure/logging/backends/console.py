"""
Console Backend

Formats records as single lines and writes them through a standard
``logging.StreamHandler``.
"""

import logging
import sys
from datetime import datetime

from ..interfaces import LogBackend, LogRecord, LogLevel, LogType
from ..structs import ConsoleBackendConfig


class ConsoleBackend(LogBackend):
    """Plain single-line console output."""

    def __init__(self, config: ConsoleBackendConfig, name: str = "console"):
        if not isinstance(config, ConsoleBackendConfig):
            raise TypeError(f"Expected ConsoleBackendConfig, got {type(config)}")

        super().__init__(name)
        self.config = config
        self.enabled = config.enabled
        self.min_level = LogLevel[config.min_level.upper()]

        stream = sys.stdout if config.stream == "stdout" else sys.stderr
        self._handler = logging.StreamHandler(stream)
        self._handler.setFormatter(logging.Formatter("%(message)s"))

    def should_handle(self, record: LogRecord) -> bool:
        if record.log_type == LogType.METRIC:
            return self.config.include_metrics
        if record.log_type == LogType.AUDIT:
            return True
        return record.level >= self.min_level

    def format(self, record: LogRecord) -> str:
        ts = datetime.fromtimestamp(record.timestamp).strftime("%H:%M:%S.%f")[:-3]

        if record.log_type == LogType.METRIC:
            tags = " ".join(f"{k}={v}" for k, v in (record.metric_tags or {}).items())
            return f"{ts} METRIC   {record.logger_name}: {record.metric_name}={record.metric_value} {tags}".rstrip()

        message = record.message
        if len(message) > self.config.max_message_length:
            message = message[:self.config.max_message_length] + "..."

        label = "AUDIT" if record.log_type == LogType.AUDIT else record.level.name
        line = f"{ts} {label:<8} {record.logger_name}: {message}"
        if self.config.include_context and record.context:
            line += " | " + " ".join(f"{k}={v}" for k, v in record.context.items())
        return line

    def write(self, record: LogRecord) -> None:
        py_record = logging.makeLogRecord({
            "name": record.logger_name,
            "levelno": int(record.level),
            "levelname": record.level.name,
            "msg": self.format(record),
            "created": record.timestamp,
        })
        self._handler.handle(py_record)

    def flush(self) -> None:
        self._handler.flush()
