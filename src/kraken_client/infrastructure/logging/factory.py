"""
Logging Factory

Creates and caches logger instances from struct-based configuration.
Components receive the result as ``self.logger``.
"""

import os
from typing import Dict, Optional

from .interfaces import HFTLoggerInterface
from .hft_logger import HFTLogger
from .backends.console import ConsoleBackend
from .structs import LoggingConfig


class LoggerFactory:
    """Simplified logging factory - trust config, fail fast."""

    _cached_loggers: Dict[str, HFTLoggerInterface] = {}
    _default_config: Optional[LoggingConfig] = None

    @classmethod
    def create_logger(cls, name: str, config: Optional[LoggingConfig] = None) -> HFTLoggerInterface:
        if name in cls._cached_loggers:
            return cls._cached_loggers[name]

        config = config or cls.get_default_config()

        backends = []
        if config.console and config.console.enabled:
            backends.append(ConsoleBackend(config.console, 'console'))

        logger = HFTLogger(
            name=name,
            backends=backends,
            propagate=config.propagate,
            redact_keys=config.redact_keys,
            default_context=config.default_context,
        )

        cls._cached_loggers[name] = logger
        return logger

    @classmethod
    def get_default_config(cls) -> LoggingConfig:
        if cls._default_config is None:
            environment = os.getenv('ENVIRONMENT', 'dev')
            if environment == 'prod':
                cls._default_config = LoggingConfig.default_production()
            else:
                cls._default_config = LoggingConfig.default_development()
        return cls._default_config

    @classmethod
    def configure(cls, config: LoggingConfig) -> None:
        """Install a new default config; previously created loggers are dropped."""
        config.validate()
        cls._default_config = config
        cls._cached_loggers.clear()

    @classmethod
    def clear_cache(cls) -> None:
        cls._cached_loggers.clear()
        cls._default_config = None


def get_logger(name: str) -> HFTLoggerInterface:
    """Get logger instance. Simple, fast."""
    return LoggerFactory.create_logger(name)


def get_exchange_logger(exchange: str, component: Optional[str] = None) -> HFTLoggerInterface:
    """Get exchange logger with optional component."""
    name = f"{exchange}.{component}" if component else exchange
    return get_logger(name)


def configure_logging(config: LoggingConfig) -> None:
    LoggerFactory.configure(config)
