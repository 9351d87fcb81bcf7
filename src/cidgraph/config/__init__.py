"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, optional_positive_float_env_var
from .errors import ConfigurationError
from .gateway import (
    DEFAULT_GATEWAY_URL,
    DEFAULT_MANIFEST_URL,
    GatewayConfig,
    build_gateway_resilience,
    get_gateway_config,
)
from .http_resilience import Backoff, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config

__all__ = [
    "DEFAULT_GATEWAY_URL",
    "DEFAULT_MANIFEST_URL",
    "Backoff",
    "ConfigurationError",
    "GatewayConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "build_gateway_resilience",
    "configure_logging",
    "get_gateway_config",
    "get_storage_config",
    "optional_env_var",
    "optional_positive_float_env_var",
]
