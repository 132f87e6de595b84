"""
Unit Tests for ConfigLoader.

Test Aspects Covered:
    ✅ Business Logic: Config loading and merging
    ✅ Error Handling: Invalid values, missing files
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from cachable_repository.config.loader import (
    ConfigLoader,
    load_cache_settings,
    load_config,
    merge_configs,
)
from cachable_repository.config.models import (
    AllowedMethods,
    CacheSettings,
    RepositoriesConfig,
)


class TestConfigLoader:
    """Test cases for ConfigLoader."""

    def test_loads_sample_config(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Shipped sample configuration file
        EXPECTED: All cache settings read, including `except` and `on`
        """
        # Act
        config = load_config(sample_config_path, environ={})

        # Assert
        assert isinstance(config, RepositoriesConfig)
        assert config.cache.minutes == 45
        assert config.cache.repository == "cache"
        assert config.cache.allowed.only is None
        assert config.cache.allowed.except_ == ["paginate"]
        assert config.cache.clean.on.update is True
        assert config.cache.clean.on.delete is False

    def test_applies_defaults(self) -> None:
        """
        SCENARIO: Minimal config with only the version
        EXPECTED: Defaults applied for missing fields
        """
        # Arrange
        loader = ConfigLoader(environ={})

        # Act
        config = loader.load_from_dict({"version": "1.0"})

        # Assert
        assert config.cache.enabled is True
        assert config.cache.minutes == 30
        assert config.cache.repository == "cache"
        assert config.cache.params.skip_cache == "skipCache"
        assert config.cache.allowed.only is None
        assert config.cache.allowed.except_ is None
        assert config.cache.clean.enabled is True

    def test_validates_invalid_config(self, tmp_path: Path) -> None:
        """
        SCENARIO: Config with negative minutes
        EXPECTED: ValidationError raised
        """
        # Arrange
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("cache:\n  minutes: -1\n")

        loader = ConfigLoader(base_path=tmp_path, environ={})

        # Act & Assert
        with pytest.raises(ValidationError):
            loader.load("invalid.yaml")

    def test_file_not_found(self, tmp_path: Path) -> None:
        """
        SCENARIO: Config path doesn't exist
        EXPECTED: FileNotFoundError raised
        """
        loader = ConfigLoader(base_path=tmp_path)

        with pytest.raises(FileNotFoundError):
            loader.load("nonexistent.yaml")

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "empty.yaml").write_text("")

        config = ConfigLoader(base_path=tmp_path, environ={}).load("empty.yaml")

        assert config.cache == CacheSettings()

    def test_merges_configs(self) -> None:
        """
        SCENARIO: Two configs merged together
        EXPECTED: Overlay values override base values
        """
        # Arrange
        base = {"cache": {"enabled": True, "minutes": 30}}
        overlay = {"cache": {"minutes": 5}}

        # Act
        merged = merge_configs(base, overlay)

        # Assert
        assert merged["cache"]["enabled"] is True  # From base
        assert merged["cache"]["minutes"] == 5  # From overlay

    def test_loads_profile_overlay(self, tmp_path: Path) -> None:
        """
        SCENARIO: Base file plus a named profile
        EXPECTED: Profile values win, others come from the base file
        """
        # Arrange
        (tmp_path / "repositories.yaml").write_text(
            "repositories:\n  cache:\n    minutes: 60\n    repository: cache\n"
        )
        profiles = tmp_path / "profiles"
        profiles.mkdir()
        (profiles / "testing.yaml").write_text("cache:\n  enabled: false\n")

        # Act
        config = load_config(
            "repositories.yaml", profile="testing", base_path=tmp_path, environ={}
        )

        # Assert
        assert config.cache.enabled is False
        assert config.cache.minutes == 60

    def test_missing_profile(self, tmp_path: Path) -> None:
        (tmp_path / "repositories.yaml").write_text("version: '1.0'\n")

        with pytest.raises(FileNotFoundError):
            load_config("repositories.yaml", profile="missing", base_path=tmp_path)

    def test_root_key_optional(self) -> None:
        """
        SCENARIO: Same settings with and without the repositories root
        EXPECTED: Identical configuration
        """
        loader = ConfigLoader(environ={})

        wrapped = loader.load_from_dict({"repositories": {"cache": {"minutes": 5}}})
        bare = loader.load_from_dict({"cache": {"minutes": 5}})

        assert wrapped == bare
        assert wrapped.cache.minutes == 5

    def test_environment_overrides_file(self, sample_config_path: Path) -> None:
        """
        SCENARIO: REPOSITORY_CACHE_* variables set
        EXPECTED: They win over the file; other settings are kept
        """
        environ = {
            "REPOSITORY_CACHE_ENABLED": "false",
            "REPOSITORY_CACHE_MINUTES": "5",
            "REPOSITORY_CACHE_BACKEND": "redis",
        }

        config = load_config(sample_config_path, environ=environ)

        assert config.cache.enabled is False
        assert config.cache.minutes == 5
        assert config.cache.repository == "redis"
        assert config.cache.allowed.except_ == ["paginate"]

    def test_invalid_environment_value(self) -> None:
        loader = ConfigLoader(environ={"REPOSITORY_CACHE_MINUTES": "soon"})

        with pytest.raises(ValidationError):
            loader.load_from_dict({})

    def test_non_mapping_file_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "list.yaml").write_text("- cache\n")

        with pytest.raises(ValueError, match="expected a mapping"):
            ConfigLoader(base_path=tmp_path).load("list.yaml")

    def test_load_cache_settings(self, sample_config_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("REPOSITORY_CACHE_MINUTES", raising=False)

        settings = load_cache_settings(sample_config_path)

        assert isinstance(settings, CacheSettings)
        assert settings.minutes == 45


class TestModels:
    """Test cases for configuration models."""

    def test_allowed_accepts_field_name_and_alias(self) -> None:
        assert AllowedMethods(except_=["all"]).except_ == ["all"]
        assert AllowedMethods.model_validate({"except": ["all"]}).except_ == ["all"]

    def test_repository_selector_stripped(self) -> None:
        assert CacheSettings(repository="  cache ").repository == "cache"

    def test_blank_skip_param_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CacheSettings.model_validate({"params": {"skip_cache": ""}})
