"""
Configuration Management Module

YAML-based configuration with environment variable substitution.

Usage:
    from kraken_client.config import ConfigManager

    config = ConfigManager().load()            # searches for config.yaml
    config = ConfigManager("my.yaml").load()   # explicit file

YAML layout (every section optional):

    kraken:
      api_key: ${KRAKEN_API_KEY:}
      secret_key: ${KRAKEN_API_SECRET:}
      base_url: https://api.kraken.com
      websocket_url: wss://ws.kraken.com
    network:
      request_timeout: 30
    websocket:
      reconnect_delay: 1.0
    rate_limiting:
      private: {capacity: 20, refill_rate: 0.33, cost: 1}
    logging:
      console: {min_level: INFO}
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import msgspec
import yaml
from dotenv import load_dotenv

from ..infrastructure.exceptions.exchange import ConfigurationError
from ..infrastructure.logging import get_logger, LoggingConfig
from .structs import (
    ExchangeConfig, ExchangeCredentials, NetworkConfig, RateLimitConfig, WebSocketConfig
)


_ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')


def guess_file_paths(file_name: str) -> List[Path]:
    """Returns a list of possible locations to search for ``file_name``."""
    return [
        Path.cwd() / file_name,
        Path(__file__).parent.parent.parent.parent / file_name,  # Project root
        Path.home() / file_name,
    ]


def substitute_env_vars(content: str) -> str:
    """
    Substitute environment variables in configuration content.

    Supports syntax:
    - ${VAR_NAME} - Required environment variable
    - ${VAR_NAME:default} - Optional with default value
    """
    def replace_var(match):
        var_expr = match.group(1)

        if ':' in var_expr:
            var_name, default_value = var_expr.split(':', 1)
            env_value = os.getenv(var_name.strip())
            return default_value if env_value is None else env_value

        env_value = os.getenv(var_expr.strip())
        if env_value is None:
            raise ConfigurationError(
                f"Required environment variable '{var_expr}' is not set", var_expr
            )
        return env_value

    return _ENV_VAR_PATTERN.sub(replace_var, content)


class ConfigManager:
    """
    Loads ``.env`` and ``config.yaml`` and builds an ``ExchangeConfig``.

    The environment file is loaded without overriding variables that are
    already set, so deployment environments win over local files.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None,
                 env_path: Optional[Union[str, Path]] = None):
        self.config_path = Path(config_path) if config_path else None
        self.env_path = Path(env_path) if env_path else None
        self._config_data: Dict[str, Any] = {}
        self.logger = get_logger('kraken.config')

    def _load_env_file(self) -> None:
        candidates = [self.env_path] if self.env_path else guess_file_paths('.env')
        for env_path in candidates:
            if env_path.exists():
                load_dotenv(dotenv_path=env_path, override=False)
                self.logger.debug("Loaded environment variables", path=str(env_path))
                return
        self.logger.debug("No .env file found - using system environment variables only")

    def _find_config_file(self) -> Optional[Path]:
        if self.config_path:
            if not self.config_path.exists():
                raise ConfigurationError(f"Config file not found: {self.config_path}")
            return self.config_path
        for path in guess_file_paths('config.yaml'):
            if path.exists():
                return path
        return None

    def _load_yaml_config(self) -> Dict[str, Any]:
        path = self._find_config_file()
        if path is None:
            self.logger.info("No config.yaml found - using built-in defaults")
            return {}

        raw_content = path.read_text()
        try:
            data = yaml.safe_load(substitute_env_vars(raw_content))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping")

        self.logger.info("Configuration loaded", path=str(path))
        return data

    def load(self) -> ExchangeConfig:
        """Load and validate the full exchange configuration."""
        self._load_env_file()
        self._config_data = self._load_yaml_config()
        return self.build_exchange_config(self._config_data)

    @staticmethod
    def build_exchange_config(data: Dict[str, Any]) -> ExchangeConfig:
        """Build an ``ExchangeConfig`` from an already parsed mapping."""
        exchange_data = data.get('kraken') or {}

        try:
            credentials = ExchangeCredentials(
                api_key=str(exchange_data.get('api_key') or ''),
                secret_key=str(exchange_data.get('secret_key') or ''),
            )
            network = msgspec.convert(data.get('network') or {}, NetworkConfig)
            websocket = msgspec.convert(data.get('websocket') or {}, WebSocketConfig)
            rate_limits = {
                name: msgspec.convert(values, RateLimitConfig)
                for name, values in (data.get('rate_limiting') or {}).items()
            }

            defaults = ExchangeConfig()
            config = ExchangeConfig(
                credentials=credentials,
                base_url=exchange_data.get('base_url', defaults.base_url),
                websocket_url=exchange_data.get('websocket_url', defaults.websocket_url),
                websocket_auth_url=exchange_data.get('websocket_auth_url', defaults.websocket_auth_url),
                network=network,
                websocket=websocket,
                rate_limits=rate_limits,
            )
            config.validate()
        except (msgspec.ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        return config

    def get_logging_config(self) -> LoggingConfig:
        """Logging section of the last loaded file, or the environment default."""
        section = self._config_data.get('logging')
        if not section:
            environment = os.getenv('ENVIRONMENT', 'dev')
            if environment == 'prod':
                return LoggingConfig.default_production()
            return LoggingConfig.default_development()
        try:
            logging_config = msgspec.convert(section, LoggingConfig)
            logging_config.validate()
            return logging_config
        except (msgspec.ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid logging configuration: {e}", 'logging') from e


def load_config(config_path: Optional[Union[str, Path]] = None) -> ExchangeConfig:
    return ConfigManager(config_path).load()
