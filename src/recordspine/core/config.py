"""Initialization configuration for :class:`~recordspine.runtime.RecordSpine`.

``Configuration`` pairs the environment-driven
:class:`~recordspine.core.settings.RecordSpineSettings` with the
collaborators that cannot come from the environment: the record and
serializer types, the migration source and the change notifier.

Example::

    config = Configuration(
        settings=RecordSpineSettings(database_name="school.db", database_version=2),
        record_types=[School, Student],
    )
    spine.initialize(config)

When ``record_types`` is empty the registry falls back to discovering
record types under ``discovery_packages``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from recordspine.core.protocols import ChangeNotifier, MigrationSource, NullChangeNotifier
from recordspine.core.settings import RecordSpineSettings


@dataclass
class Configuration:
    settings: RecordSpineSettings = field(default_factory=RecordSpineSettings)
    record_types: Sequence[type] = ()
    serializer_types: Sequence[type] = ()
    discovery_packages: Sequence[str] = ()
    migration_source: MigrationSource | None = None
    change_notifier: ChangeNotifier = field(default_factory=NullChangeNotifier)

    @property
    def is_valid(self) -> bool:
        """True when record types were listed explicitly."""
        return bool(self.record_types)

    @property
    def uses_discovery(self) -> bool:
        return not self.record_types and bool(self.discovery_packages)

    def resolve_migration_source(self) -> MigrationSource | None:
        """Explicit source, else the ``migrations`` directory under the assets."""
        if self.migration_source is not None:
            return self.migration_source
        migrations_dir = self.settings.migrations_dir
        if migrations_dir is None:
            return None
        from recordspine.migrations.runner import DirectoryMigrationSource

        return DirectoryMigrationSource(migrations_dir)


__all__ = ["Configuration"]
