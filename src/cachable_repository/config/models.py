"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_CACHE_MINUTES = 30
DEFAULT_SKIP_CACHE_PARAM = "skipCache"
DEFAULT_BACKEND_SELECTOR = "cache"


class AllowedMethods(BaseModel):
    """Allow-list / deny-list of cacheable method names."""

    only: Optional[List[str]] = Field(default=None)
    except_: Optional[List[str]] = Field(default=None, alias="except")

    model_config = {"populate_by_name": True}


class CacheParams(BaseModel):
    """Names of request parameters the caching layer reacts to."""

    skip_cache: str = Field(default=DEFAULT_SKIP_CACHE_PARAM, min_length=1)


class CleanOn(BaseModel):
    """Write operations that flush a repository's cached reads."""

    create: bool = True
    update: bool = True
    delete: bool = True


class CleanSettings(BaseModel):
    """Cache invalidation on writes."""

    enabled: bool = True
    on: CleanOn = Field(default_factory=CleanOn)

    @model_validator(mode="before")
    @classmethod
    def _unquoted_on_key(cls, data: Any) -> Any:
        # YAML 1.1 loads a bare `on:` key as the boolean True
        if isinstance(data, dict) and True in data and "on" not in data:
            data = dict(data)
            data["on"] = data.pop(True)
        return data


class CacheSettings(BaseModel):
    """Configuration for repository caching."""

    enabled: bool = True
    minutes: int = Field(default=DEFAULT_CACHE_MINUTES, ge=0)
    repository: str = Field(default=DEFAULT_BACKEND_SELECTOR, min_length=1)
    params: CacheParams = Field(default_factory=CacheParams)
    allowed: AllowedMethods = Field(default_factory=AllowedMethods)
    clean: CleanSettings = Field(default_factory=CleanSettings)
    key_registry_path: Optional[str] = Field(default=None)

    @field_validator("repository")
    @classmethod
    def _strip_selector(cls, value: str) -> str:
        return value.strip()


class RepositoriesConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    cache: CacheSettings = Field(default_factory=CacheSettings)
