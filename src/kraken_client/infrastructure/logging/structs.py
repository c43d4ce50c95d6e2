"""
Logging Configuration Structures

Structured configuration for the logging system using msgspec.Struct.
"""

from typing import Optional, Dict, Any, List
from msgspec import Struct


VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class BackendConfig(Struct, frozen=True):
    """
    Base configuration for all logging backends.

    Attributes:
        enabled: Whether this backend is active
        min_level: Minimum log level to process (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    enabled: bool = True
    min_level: str = "INFO"

    def validate(self) -> None:
        if self.min_level.upper() not in VALID_LEVELS:
            raise ValueError(f"Invalid log level: {self.min_level}")


class ConsoleBackendConfig(BackendConfig):
    """
    Console backend configuration.

    Attributes:
        include_context: Append context key=value pairs to the line
        include_metrics: Also print metric records (at DEBUG)
        max_message_length: Maximum message length before truncation
        stream: "stderr" or "stdout"
    """
    include_context: bool = True
    include_metrics: bool = False
    max_message_length: int = 1000
    stream: str = "stderr"

    def validate(self) -> None:
        super().validate()
        if self.stream not in {"stderr", "stdout"}:
            raise ValueError(f"Invalid stream: {self.stream}")
        if self.max_message_length <= 0:
            raise ValueError("max_message_length must be positive")


class LoggingConfig(Struct, frozen=True):
    """
    Complete logging configuration.

    Attributes:
        environment: Environment name (dev, prod, test)
        console: Console backend configuration
        propagate: Forward WARNING and above to the standard ``logging`` tree
        redact_keys: Extra context keys whose values are masked
        default_context: Default context for all log messages
    """
    environment: str = "dev"
    console: Optional[ConsoleBackendConfig] = None
    propagate: bool = True
    redact_keys: List[str] = []
    default_context: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        if self.environment not in {"dev", "prod", "test", "staging"}:
            raise ValueError(f"Invalid environment: {self.environment}")
        if self.console:
            self.console.validate()

    @classmethod
    def default_development(cls) -> "LoggingConfig":
        return cls(
            environment="dev",
            console=ConsoleBackendConfig(enabled=True, min_level="DEBUG", include_context=True)
        )

    @classmethod
    def default_production(cls) -> "LoggingConfig":
        return cls(
            environment="prod",
            console=ConsoleBackendConfig(enabled=True, min_level="WARNING")
        )
