"""Application configuration helpers."""

from __future__ import annotations

from .console import ConsoleSettings, get_console_settings
from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .gateway import GatewayConfig, get_gateway_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "ConsoleSettings",
    "DatabaseConfig",
    "GatewayConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_console_settings",
    "get_database_config",
    "get_gateway_config",
    "get_storage_config",
    "require_env_vars",
]
