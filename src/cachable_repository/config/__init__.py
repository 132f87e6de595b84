"""
Configuration Package - Models and Loaders.

Configuration Structure:
    - RepositoriesConfig: Root configuration object
    - CacheSettings: Enable flag, TTL, backend selector, method lists
    - AllowedMethods / CacheParams / CleanSettings: Nested sections

Design Principles:
    - Type-safe via Pydantic
    - Validation on load (fail fast)
    - Support for profiles and environment overrides
"""

from cachable_repository.config.loader import (
    ConfigLoader,
    load_cache_settings,
    load_config,
    merge_configs,
)
from cachable_repository.config.models import (
    AllowedMethods,
    CacheParams,
    CacheSettings,
    CleanOn,
    CleanSettings,
    RepositoriesConfig,
)

__all__ = [
    "AllowedMethods",
    "CacheParams",
    "CacheSettings",
    "CleanOn",
    "CleanSettings",
    "ConfigLoader",
    "RepositoriesConfig",
    "load_cache_settings",
    "load_config",
    "merge_configs",
]
