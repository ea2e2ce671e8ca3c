"""
Schema bootstrap: bring a physical database to the expected version.

Manifesto:
    Opening a database leaves it at the target schema version or fails
    with the stored version untouched. Every phase that runs more than one
    statement runs in its own transaction.

    - **Create:** fresh database (stored version 0). Tables, then indexes,
      then every migration up to the target (from version ``-1``)
    - **Upgrade:** stored version below target. Tables (``IF NOT EXISTS``
      never touches existing data), then migrations in
      ``old < v <= new``, then indexes
    - **Open:** stored version equals target. Pragmas only
    - **Downgrade:** refused with ``SchemaVersionError``

Architecture:
    ::

        SchemaBootstrap.run(target)
              │
              ├── pragmas (foreign_keys=ON when supported)
              │
              ├── version == 0 ────────► CREATE TABLEs ► CREATE INDEXes ► migrate(-1, target)
              ├── version <  target ───► CREATE TABLEs ► migrate(old, target) ► CREATE INDEXes
              ├── version == target ───► (nothing)
              └── version >  target ───► SchemaVersionError

Tags:
    bootstrap, schema, migrations, ddl, recordspine

Doc-Types:
    - Technical Design
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from recordspine.core.errors import (
    MigrationExecutionFailure,
    SchemaVersionError,
    StatementExecutionFailure,
)
from recordspine.core.logging import get_logger
from recordspine.core.protocols import StorageEngine
from recordspine.metadata.ddl import create_index_definitions, create_table_definition
from recordspine.metadata.registry import MetadataRegistry
from recordspine.migrations.runner import MigrationRunner

logger = get_logger(__name__)

FRESH_VERSION = -1


class BootstrapAction(str, Enum):
    CREATE = "create"
    UPGRADE = "upgrade"
    OPEN = "open"


@dataclass
class BootstrapResult:
    action: BootstrapAction
    from_version: int
    to_version: int
    migrations: list[str] = field(default_factory=list)


class SchemaBootstrap:
    """Creates and upgrades the schema described by a metadata registry."""

    def __init__(
        self,
        engine: StorageEngine,
        metadata: MetadataRegistry,
        runner: MigrationRunner | None = None,
    ) -> None:
        self._engine = engine
        self._metadata = metadata
        self._runner = runner or MigrationRunner(engine)

    def run(self, target_version: int) -> BootstrapResult:
        self.execute_pragmas()
        stored = self._engine.version

        if stored == 0:
            return self.create(target_version)
        if stored < target_version:
            return self.upgrade(stored, target_version)
        if stored > target_version:
            raise SchemaVersionError(
                f"Database is at version {stored}, newer than target {target_version}"
            ).with_context(version=stored, target_version=target_version)

        logger.debug("bootstrap.opened", version=stored)
        return BootstrapResult(BootstrapAction.OPEN, stored, stored)

    def create(self, target_version: int) -> BootstrapResult:
        logger.info("bootstrap.creating", tables=len(self._metadata), version=target_version)
        self.create_tables()
        self.create_indexes()
        migrated = self._runner.migrate(FRESH_VERSION, target_version)
        return BootstrapResult(BootstrapAction.CREATE, FRESH_VERSION, target_version, migrated.applied)

    def upgrade(self, old_version: int, new_version: int) -> BootstrapResult:
        logger.info("bootstrap.upgrading", from_version=old_version, to_version=new_version)
        self.create_tables()
        migrated = self._runner.migrate(old_version, new_version)
        self.create_indexes()
        return BootstrapResult(BootstrapAction.UPGRADE, old_version, new_version, migrated.applied)

    def execute_pragmas(self) -> None:
        if self._engine.foreign_keys_supported:
            self._engine.execute("PRAGMA foreign_keys=ON")
            logger.debug("bootstrap.foreign_keys_enabled")
        else:
            logger.info("bootstrap.foreign_keys_unsupported")

    def table_statements(self) -> list[str]:
        foreign_keys = self._engine.foreign_keys_supported
        return [
            create_table_definition(descriptor, self._metadata, foreign_keys=foreign_keys)
            for descriptor in self._metadata.descriptors()
        ]

    def index_statements(self) -> list[str]:
        statements: list[str] = []
        for descriptor in self._metadata.descriptors():
            statements.extend(create_index_definitions(descriptor))
        return statements

    def create_tables(self) -> None:
        self._run_phase("create_tables", self.table_statements())

    def create_indexes(self) -> None:
        self._run_phase("create_indexes", self.index_statements())

    def _run_phase(self, phase: str, statements: list[str]) -> None:
        self._engine.begin_transaction()
        try:
            for sql in statements:
                try:
                    self._engine.execute(sql)
                except StatementExecutionFailure as e:
                    raise MigrationExecutionFailure(
                        f"Bootstrap phase {phase} failed: {e.message}", cause=e.cause or e
                    ).with_context(sql=sql, phase=phase) from e
            self._engine.set_transaction_successful()
        finally:
            self._engine.end_transaction()
        logger.debug("bootstrap.phase_completed", phase=phase, statements=len(statements))


__all__ = ["SchemaBootstrap", "BootstrapAction", "BootstrapResult", "FRESH_VERSION"]
