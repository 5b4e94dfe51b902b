"""Application configuration helpers."""

from __future__ import annotations

from .env import env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .geostore import GeoStoreConfig, get_geostore_config, normalize_base_url
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .orchestration import (
    DEFAULT_MAX_DETAILS_LENGTH,
    EMPTY_DETAILS_MARKER,
    NotificationDefaults,
    OrchestrationConfig,
    get_orchestration_config,
)

__all__ = [
    "DEFAULT_MAX_DETAILS_LENGTH",
    "EMPTY_DETAILS_MARKER",
    "CacheConfig",
    "ConfigurationError",
    "GeoStoreConfig",
    "MissingConfigurationError",
    "NotificationDefaults",
    "OrchestrationConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "env_int",
    "get_geostore_config",
    "get_orchestration_config",
    "normalize_base_url",
    "optional_env_var",
    "require_env_vars",
]
