"""
Logging System

Structured logging with key/value context and metric records.

Usage:
    from kraken_client.infrastructure.logging import get_logger

    logger = get_logger('kraken.ws.public')
    logger.info("Subscribed", channel="ticker", pair="XBT/USD")

    # Metrics logging
    logger.metric("rest_request_latency_ms", 12.3, endpoint="/0/public/Time")
"""

from .interfaces import (
    LogLevel,
    LogType,
    LogRecord,
    LogBackend,
    HFTLoggerInterface
)

from .hft_logger import HFTLogger, LoggingTimer, redact_context, SENSITIVE_CONTEXT_KEYS

from .factory import (
    LoggerFactory,
    get_logger,
    get_exchange_logger,
    configure_logging,
)

from .structs import (
    LoggingConfig,
    ConsoleBackendConfig,
    BackendConfig
)

from .backends.console import ConsoleBackend

__all__ = [
    'LogLevel',
    'LogType',
    'LogRecord',
    'LogBackend',
    'HFTLoggerInterface',
    'HFTLogger',
    'LoggingTimer',
    'redact_context',
    'SENSITIVE_CONTEXT_KEYS',
    'LoggerFactory',
    'get_logger',
    'get_exchange_logger',
    'configure_logging',
    'LoggingConfig',
    'ConsoleBackendConfig',
    'BackendConfig',
    'ConsoleBackend',
]
