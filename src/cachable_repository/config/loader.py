"""
Configuration Loader - Repository Cache Settings from YAML.

Reads a repositories configuration file, overlays an optional profile
and environment variables, and validates the result with the Pydantic
models.

File Layout:
    repositories:            # optional root key
      cache:
        enabled: true
        minutes: 30
        repository: cache
        allowed:
          only: null
          except: [paginate]

Profiles live next to the main file: `<dir>/profiles/<name>.yaml`,
using the same layout, and are deep-merged over it.

Environment Overrides (applied last):
    REPOSITORY_CACHE_ENABLED  -> cache.enabled
    REPOSITORY_CACHE_MINUTES  -> cache.minutes
    REPOSITORY_CACHE_BACKEND  -> cache.repository
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from cachable_repository.config.models import CacheSettings, RepositoriesConfig

logger = logging.getLogger(__name__)

ROOT_KEY = "repositories"

ENV_OVERRIDES = {
    "REPOSITORY_CACHE_ENABLED": "enabled",
    "REPOSITORY_CACHE_MINUTES": "minutes",
    "REPOSITORY_CACHE_BACKEND": "repository",
}


class ConfigLoader:
    """
    Loads and validates repository cache configuration.

    Usage:
        loader = ConfigLoader(base_path=Path("config"))
        config = loader.load("repositories.yaml", profile="testing")
        settings = config.cache
    """

    def __init__(
        self,
        base_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Initialize config loader.

        Args:
            base_path: Directory relative config paths are resolved against
            environ: Environment to read overrides from (os.environ if None)
        """
        self._base_path = Path(base_path) if base_path else Path(".")
        self._environ = os.environ if environ is None else environ

    def load(
        self,
        config_path: Union[str, Path],
        profile: Optional[str] = None,
    ) -> RepositoriesConfig:
        """
        Load configuration from a YAML file.

        Args:
            config_path: Config file, absolute or relative to base_path
            profile: Optional profile merged over the file

        Returns:
            Validated RepositoriesConfig

        Raises:
            FileNotFoundError: If the file or the profile doesn't exist
            ValueError: If a file does not hold a mapping
            ValidationError: If the merged config is invalid
        """
        path = self._base_path / config_path
        data = _unwrap(self._read(path))

        if profile:
            profile_path = path.parent / "profiles" / f"{profile}.yaml"
            if not profile_path.is_file():
                raise FileNotFoundError(f"Profile '{profile}' not found at {profile_path}")
            data = merge_configs(data, _unwrap(self._read(profile_path)))
            logger.info(f"Applied config profile '{profile}'")

        return self.load_from_dict(data)

    def load_from_dict(self, data: Dict[str, Any]) -> RepositoriesConfig:
        """Validate a config mapping, applying environment overrides."""
        data = _unwrap(data)
        cache = dict(data.get("cache") or {})

        for variable, field in ENV_OVERRIDES.items():
            if variable in self._environ:
                cache[field] = self._environ[variable]
                logger.debug(f"cache.{field} overridden by {variable}")

        return RepositoriesConfig.model_validate({**data, "cache": cache})

    def _read(self, path: Path) -> Dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(
                f"{path}: expected a mapping, got {type(data).__name__}"
            )
        return data


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into a copy of base; overlay values win."""
    result = dict(base)
    for key, value in overlay.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def _unwrap(data: Dict[str, Any]) -> Dict[str, Any]:
    if ROOT_KEY in data:
        return dict(data[ROOT_KEY] or {})
    return data


def load_config(
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RepositoriesConfig:
    """Load repositories configuration (see ConfigLoader.load)."""
    return ConfigLoader(base_path=base_path, environ=environ).load(config_path, profile)


def load_cache_settings(
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
) -> CacheSettings:
    """Load only the cache section, ready to hand to CachedRepository."""
    return load_config(config_path, profile, base_path).cache
