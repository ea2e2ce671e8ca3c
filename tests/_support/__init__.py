"""
Test support utilities for recordspine tests.

Sample record types live in :mod:`tests._support.records`; the
``discoverable`` package is scanned by the discovery tests and contains one
module that fails to import on purpose.
"""

from __future__ import annotations

from pathlib import Path


def write_migrations(directory: Path, scripts: dict[str, str]) -> Path:
    """Write ``{file name: script}`` into ``directory`` and return it."""
    directory.mkdir(parents=True, exist_ok=True)
    for name, script in scripts.items():
        (directory / name).write_text(script, encoding="utf-8")
    return directory


class RecordingNotifier:
    """Change notifier that remembers every table it was told about."""

    def __init__(self) -> None:
        self.tables: list[str] = []

    def notify_change(self, table_name: str) -> None:
        self.tables.append(table_name)


class ExplodingNotifier:
    def notify_change(self, table_name: str) -> None:
        raise RuntimeError(f"observer for {table_name} is gone")
