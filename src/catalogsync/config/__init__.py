"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, env_list, optional_env, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    vendor_api_resilience,
)
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_http_cache_path,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "env_list",
    "get_database_config",
    "get_database_uri",
    "get_http_cache_path",
    "get_storage_config",
    "get_sync_config",
    "optional_env",
    "require_env_vars",
    "vendor_api_resilience",
]
