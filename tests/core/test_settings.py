"""Tests for recordspine.core.settings and recordspine.core.config."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from recordspine.core.config import Configuration
from recordspine.core.protocols import NullChangeNotifier
from recordspine.core.settings import (
    DEFAULT_CACHE_SIZE,
    DEFAULT_DATABASE_NAME,
    RecordSpineSettings,
    SqlParserMode,
)
from recordspine.migrations.runner import DirectoryMigrationSource


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "RECORDSPINE_DATABASE_NAME",
        "RECORDSPINE_DATABASE_VERSION",
        "RECORDSPINE_SQL_PARSER",
        "RECORDSPINE_CACHE_SIZE",
        "RECORDSPINE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        settings = RecordSpineSettings()
        assert settings.database_name == DEFAULT_DATABASE_NAME == "Application.db"
        assert settings.database_version == 1
        assert settings.sql_parser is SqlParserMode.LEGACY
        assert settings.cache_size == DEFAULT_CACHE_SIZE == 1024
        assert settings.assets_dir is None
        assert settings.logging_enabled is False

    def test_version_zero_means_one(self):
        assert RecordSpineSettings(database_version=0).database_version == 1

    def test_negative_version_rejected(self):
        with pytest.raises(ValidationError):
            RecordSpineSettings(database_version=-1)

    def test_cache_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            RecordSpineSettings(cache_size=0)


class TestLogLevel:
    @pytest.mark.parametrize("value", ["verbose", "debug", "Info", "WARNING", "error"])
    def test_known_levels_are_normalized(self, value):
        assert RecordSpineSettings(log_level=value).log_level == value.upper()

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError):
            RecordSpineSettings(log_level="verbse")

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("RECORDSPINE_LOG_LEVEL", "verbose")
        assert RecordSpineSettings().log_level == "VERBOSE"


class TestEnvironment:
    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("RECORDSPINE_DATABASE_NAME", "school.db")
        monkeypatch.setenv("RECORDSPINE_DATABASE_VERSION", "4")
        monkeypatch.setenv("RECORDSPINE_SQL_PARSER", "delimited")

        settings = RecordSpineSettings()

        assert settings.database_name == "school.db"
        assert settings.database_version == 4
        assert settings.sql_parser is SqlParserMode.DELIMITED

    def test_invalid_parser_rejected(self, monkeypatch):
        monkeypatch.setenv("RECORDSPINE_SQL_PARSER", "yaml")
        with pytest.raises(ValidationError):
            RecordSpineSettings()


class TestPaths:
    def test_database_path(self, tmp_path):
        settings = RecordSpineSettings(database_name="school.db", data_dir=tmp_path)
        assert settings.database_path == tmp_path / "school.db"
        assert settings.is_memory is False

    def test_memory_database_has_no_path(self):
        settings = RecordSpineSettings(database_name=":memory:")
        assert settings.is_memory is True
        assert settings.database_path is None

    def test_migrations_dir(self, tmp_path):
        settings = RecordSpineSettings(assets_dir=tmp_path)
        assert settings.migrations_dir == tmp_path / "migrations"

    def test_no_assets_no_migrations_dir(self):
        assert RecordSpineSettings().migrations_dir is None


class TestConfiguration:
    def test_explicit_types_are_valid(self):
        config = Configuration(record_types=[object])
        assert config.is_valid is True
        assert config.uses_discovery is False

    def test_discovery_when_no_types(self):
        config = Configuration(discovery_packages=["myapp.records"])
        assert config.is_valid is False
        assert config.uses_discovery is True

    def test_default_notifier(self):
        assert isinstance(Configuration().change_notifier, NullChangeNotifier)

    def test_migration_source_from_assets(self, tmp_path):
        config = Configuration(settings=RecordSpineSettings(assets_dir=tmp_path))
        source = config.resolve_migration_source()
        assert isinstance(source, DirectoryMigrationSource)
        assert source.path == Path(tmp_path) / "migrations"

    def test_explicit_migration_source_wins(self, tmp_path):
        explicit = DirectoryMigrationSource(tmp_path / "custom")
        config = Configuration(
            settings=RecordSpineSettings(assets_dir=tmp_path),
            migration_source=explicit,
        )
        assert config.resolve_migration_source() is explicit

    def test_no_source_without_assets(self):
        assert Configuration().resolve_migration_source() is None
