"""Versioned migration runner.

Scripts are named by the schema version they produce (``1.sql``,
``2.sql``, ...). Advancing from ``old`` to ``new`` applies every script
with ``old < version <= new`` in ascending numeric order, all inside one
transaction together with the update of the stored schema version. A
failing statement rolls the whole run back and leaves the version as it
was.

Badly named scripts are reported as ``MigrationParseFailure`` and skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from recordspine.core.errors import (
    MigrationExecutionFailure,
    MigrationParseFailure,
    StatementExecutionFailure,
)
from recordspine.core.logging import get_logger
from recordspine.core.protocols import MigrationSource, StorageEngine
from recordspine.core.settings import SqlParserMode
from recordspine.migrations.sql_parser import parse_script

logger = get_logger(__name__)

SCRIPT_SUFFIX = ".sql"


@dataclass
class MigrationResult:
    """Result of a migration run."""

    from_version: int
    to_version: int
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class DirectoryMigrationSource:
    """Migration scripts stored as ``<version>.sql`` files in one directory.

    A missing directory is an empty source.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def list_scripts(self) -> list[str]:
        if not self._path.is_dir():
            return []
        return sorted(p.name for p in self._path.glob(f"*{SCRIPT_SUFFIX}") if p.is_file())

    def read_script(self, name: str) -> str:
        return (self._path / name).read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"DirectoryMigrationSource({str(self._path)!r})"


class EmptyMigrationSource:
    def list_scripts(self) -> list[str]:
        return []

    def read_script(self, name: str) -> str:
        raise FileNotFoundError(name)


def parse_version(name: str) -> int:
    """Schema version encoded in a script name (``"12.sql"`` → ``12``)."""
    stem = name[: -len(SCRIPT_SUFFIX)] if name.endswith(SCRIPT_SUFFIX) else name
    try:
        return int(stem)
    except ValueError as e:
        raise MigrationParseFailure(
            f"Invalid migration script name: {name}", cause=e
        ).with_context(script=name) from e


class MigrationRunner:
    """Applies migration scripts from a :class:`MigrationSource`.

    Example:
        runner = MigrationRunner(db, DirectoryMigrationSource("assets/migrations"))
        result = runner.migrate(old_version=1, new_version=3)
        print(result.applied)   # ['2.sql', '3.sql']
    """

    def __init__(
        self,
        engine: StorageEngine,
        source: MigrationSource | None = None,
        parser: SqlParserMode | str = SqlParserMode.LEGACY,
    ) -> None:
        self._engine = engine
        self._source = source or EmptyMigrationSource()
        self._parser = SqlParserMode(parser)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def scripts(self) -> list[tuple[int, str]]:
        """All correctly named scripts as ``(version, name)``, ascending."""
        versioned = []
        for name in self._source.list_scripts():
            try:
                versioned.append((parse_version(name), name))
            except MigrationParseFailure as err:
                logger.warning("migration.invalid_name", **err.to_dict())
        return sorted(versioned)

    def pending(self, old_version: int, new_version: int) -> list[tuple[int, str]]:
        return [(v, name) for v, name in self.scripts() if old_version < v <= new_version]

    def migrate(self, old_version: int, new_version: int) -> MigrationResult:
        """Apply pending scripts and store ``new_version``, in one transaction.

        Raises:
            MigrationExecutionFailure: a statement failed; nothing was applied.
        """
        result = MigrationResult(from_version=old_version, to_version=new_version)
        pending = self.pending(old_version, new_version)

        self._engine.begin_transaction()
        try:
            for version, name in pending:
                self._apply(version, name)
                result.applied.append(name)
            self._engine.version = new_version
            self._engine.set_transaction_successful()
        finally:
            self._engine.end_transaction()

        logger.info(
            "migration.completed",
            from_version=old_version,
            to_version=new_version,
            applied=result.applied,
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply(self, version: int, name: str) -> None:
        try:
            script = self._source.read_script(name)
        except OSError as e:
            raise MigrationExecutionFailure(
                f"Could not read migration {name}: {e}", cause=e
            ).with_context(script=name, version=version) from e

        for statement in parse_script(script, self._parser):
            try:
                self._engine.execute(statement)
            except StatementExecutionFailure as e:
                raise MigrationExecutionFailure(
                    f"Migration {name} failed: {e.message}", cause=e.cause or e
                ).with_context(script=name, version=version, sql=statement) from e
        logger.info("migration.applied", script=name, version=version)


__all__ = [
    "DirectoryMigrationSource",
    "EmptyMigrationSource",
    "MigrationResult",
    "MigrationRunner",
    "parse_version",
    "SCRIPT_SUFFIX",
]
