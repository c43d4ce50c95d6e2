from .structs import (
    NetworkConfig,
    RateLimitConfig,
    WebSocketConfig,
    ExchangeCredentials,
    ExchangeConfig,
    DEFAULT_RATE_LIMITS,
)
from .config_manager import ConfigManager, load_config, substitute_env_vars

__all__ = [
    'NetworkConfig',
    'RateLimitConfig',
    'WebSocketConfig',
    'ExchangeCredentials',
    'ExchangeConfig',
    'DEFAULT_RATE_LIMITS',
    'ConfigManager',
    'load_config',
    'substitute_env_vars',
]
