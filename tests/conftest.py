"""
Shared pytest fixtures and configuration for recordspine tests.

This module provides:
- A metadata registry populated with the sample record types
- An open in-memory SqliteDatabase
- An initialized in-memory RecordSpine with a recording change notifier
- Logging switched off and structlog reset between tests

Usage:
    def test_something(spine, notifier):
        Student(name="Alice").save(spine)
        assert notifier.tables == ["Student"]
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from recordspine.core.config import Configuration
from recordspine.core.logging import set_engine_level, set_logging_enabled
from recordspine.core.settings import RecordSpineSettings
from recordspine.core.sqlite_conn import SqliteDatabase
from recordspine.metadata.registry import MetadataRegistry
from recordspine.runtime import RecordSpine
from tests._support import RecordingNotifier
from tests._support.records import ALL_RECORDS


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests that touch database files as integration tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "tmp_path" in getattr(item, "fixturenames", ()):
            item.add_marker(pytest.mark.integration)
        elif not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[None, None, None]:
    """Logging is off by default; tests that need it turn it on."""
    set_logging_enabled(False)
    set_engine_level("DEBUG")
    yield
    set_logging_enabled(False)
    set_engine_level("DEBUG")
    structlog.reset_defaults()


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def metadata() -> MetadataRegistry:
    registry = MetadataRegistry()
    registry.register(ALL_RECORDS)
    return registry


@pytest.fixture
def db() -> Generator[SqliteDatabase, None, None]:
    database = SqliteDatabase(":memory:")
    database.open()
    yield database
    database.close()


@pytest.fixture
def memory_settings(tmp_path: Path) -> RecordSpineSettings:
    return RecordSpineSettings(database_name=":memory:", data_dir=tmp_path)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def spine(notifier: RecordingNotifier) -> Generator[RecordSpine, None, None]:
    """Initialized in-memory RecordSpine with every sample record type."""
    runtime = RecordSpine()
    runtime.initialize(
        Configuration(
            settings=RecordSpineSettings(database_name=":memory:"),
            record_types=ALL_RECORDS,
            change_notifier=notifier,
        )
    )
    yield runtime
    runtime.dispose()
