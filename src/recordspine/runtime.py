"""
RecordSpine -- the process registry facade.

Manifesto:
    One object owns everything that is shared between threads: the open
    database, the metadata registry and the identity cache. Applications
    hold an explicit reference to it (or inject it) instead of reaching
    for ambient global state, and its lifetime is explicit:
    ``initialize()`` builds it up, ``dispose()`` tears it down.

    - **All or nothing:** ``initialize`` either leaves a usable engine at
      the target schema version or raises one ``InitializationError``
    - **One lock:** cache and database access share a single ``RLock``
    - **Explicit names:** ``fetch_one()`` and ``delete_one()`` instead of
      one overloaded "execute single"
    - **Quiet collaborators:** a failing change notifier is logged, never
      allowed to fail the mutation that triggered it

Architecture:
    ::

        RecordSpine.initialize(config)
          │
          ├─ set_engine_level / set_logging_enabled (engine loggers only)
          ├─ MetadataRegistry.register(...) | .discover(packages)
          ├─ IdentityCache(metadata, capacity, lock=self._lock)
          ├─ copy_attached_database(assets_dir, database_path)
          ├─ SqliteDatabase(path).open()
          └─ SchemaBootstrap(db, metadata, MigrationRunner(...)).run(version)

        spine.select().from_(Student).where("age > ?", 18).execute()
              │                                             │
              ▼                                             ▼
          Select(metadata, executor=spine)       spine.run_query(...)
                                                 rows ─► hydrate ─► cache.put

Examples:
    >>> spine = RecordSpine()
    >>> spine.initialize(Configuration(settings=RecordSpineSettings(database_name=":memory:"),
    ...                                record_types=[Student]))
    >>> alice = Student(name="Alice", age=30)
    >>> spine.save(alice)
    1
    >>> spine.select().from_(Student).where("name = ?", "Alice").fetch_one() == alice
    True

Tags:
    runtime, facade, lifecycle, orm, recordspine

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from recordspine.bootstrap import BootstrapResult, SchemaBootstrap
from recordspine.cache import IdentityCache
from recordspine.core.assets import copy_attached_database
from recordspine.core.config import Configuration
from recordspine.core.errors import InitializationError, NotInitializedError
from recordspine.core.logging import get_logger, set_engine_level, set_logging_enabled
from recordspine.core.protocols import ChangeNotifier, NullChangeNotifier, StorageEngine
from recordspine.core.settings import MEMORY_DATABASE, RecordSpineSettings
from recordspine.core.sqlite_conn import SqliteDatabase
from recordspine.hydration import LazyRecordList, hydrate
from recordspine.metadata.model import Model
from recordspine.metadata.registry import MetadataRegistry
from recordspine.migrations.runner import MigrationRunner
from recordspine.query.base import RenderedStatement, normalize_arguments
from recordspine.query.select import Delete, Select, SelectColumn
from recordspine.query.update import Insert, Update

logger = get_logger(__name__)

M = TypeVar("M", bound=Model)


class RecordSpine:
    """Owns the database handle, metadata registry and identity cache."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._settings: RecordSpineSettings | None = None
        self._database: StorageEngine | None = None
        self._metadata: MetadataRegistry | None = None
        self._cache: IdentityCache | None = None
        self._notifier: ChangeNotifier = NullChangeNotifier()
        self._bootstrap_result: BootstrapResult | None = None
        self._inserted: list[Model] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        config: Configuration | None = None,
        *,
        engine: StorageEngine | None = None,
    ) -> None:
        """Build the registry, open the database and bring its schema up to date.

        Args:
            config: Settings and collaborators; defaults read the environment.
            engine: Storage engine to use instead of a ``SqliteDatabase``
                built from the settings.

        Raises:
            InitializationError: anything failed; ``cause`` holds the reason
                and nothing stays open.
        """
        with self._lock:
            if self.is_initialized:
                logger.info("runtime.already_initialized")
                return

            config = config or Configuration()
            settings = config.settings

            database: StorageEngine | None = None
            try:
                set_engine_level(settings.log_level)
                set_logging_enabled(settings.logging_enabled)

                metadata = MetadataRegistry()
                metadata.register(config.record_types, config.serializer_types)
                if config.uses_discovery:
                    metadata.discover(config.discovery_packages)
                elif not config.is_valid:
                    logger.warning("runtime.no_record_types")

                cache = IdentityCache(metadata, settings.cache_size, lock=self._lock)

                database = engine or self._create_database(settings)
                database.open()

                runner = MigrationRunner(
                    database,
                    config.resolve_migration_source(),
                    settings.sql_parser,
                )
                result = SchemaBootstrap(database, metadata, runner).run(settings.database_version)
            except Exception as e:
                if database is not None and database.is_open:
                    database.close()
                logger.error("runtime.initialize_failed", error=str(e), error_type=type(e).__name__)
                raise InitializationError(f"Initialization failed: {e}", cause=e).with_context(
                    path=settings.database_name, version=settings.database_version
                ) from e

            self._settings = settings
            self._metadata = metadata
            self._cache = cache
            self._database = database
            self._notifier = config.change_notifier or NullChangeNotifier()
            self._bootstrap_result = result

            logger.info(
                "runtime.initialized",
                database=settings.database_name,
                version=result.to_version,
                action=result.action.value,
                record_types=len(metadata),
            )

    @staticmethod
    def _create_database(settings: RecordSpineSettings) -> SqliteDatabase:
        if settings.is_memory:
            return SqliteDatabase(MEMORY_DATABASE)
        path = settings.database_path
        copy_attached_database(settings.assets_dir, path)
        return SqliteDatabase(path)

    def dispose(self) -> None:
        """Clear the cache, close the database and drop the registry."""
        with self._lock:
            if self._cache is not None:
                self._cache.clear()
            if self._database is not None:
                self._database.close()
            was_initialized = self._database is not None
            self._settings = None
            self._database = None
            self._metadata = None
            self._cache = None
            self._notifier = NullChangeNotifier()
            self._bootstrap_result = None
            self._inserted = []
        if was_initialized:
            logger.info("runtime.disposed")

    @property
    def is_initialized(self) -> bool:
        return self._database is not None

    def clear_cache(self) -> None:
        """Evict every cached record; the database stays open."""
        self.cache.clear()

    def __enter__(self) -> RecordSpine:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def _require(self, value: Any, name: str) -> Any:
        if value is None:
            raise NotInitializedError(f"RecordSpine.{name} used before initialize()")
        return value

    @property
    def database(self) -> StorageEngine:
        return self._require(self._database, "database")

    @property
    def metadata(self) -> MetadataRegistry:
        return self._require(self._metadata, "metadata")

    @property
    def cache(self) -> IdentityCache:
        return self._require(self._cache, "cache")

    @property
    def settings(self) -> RecordSpineSettings:
        return self._require(self._settings, "settings")

    @property
    def bootstrap_result(self) -> BootstrapResult | None:
        return self._bootstrap_result

    def table_name(self, record_type: type[Model]) -> str:
        return self.metadata.table_name(record_type)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin_transaction(self) -> None:
        with self._lock:
            self.database.begin_transaction()

    def set_transaction_successful(self) -> None:
        with self._lock:
            self.database.set_transaction_successful()

    def end_transaction(self) -> None:
        """Close one level; a rollback of the outermost level resets the cache.

        Records inserted inside the rolled-back transaction get their ``id``
        reset to ``None``, and the identity cache is cleared so no instance
        outlives the rows it mirrors.
        """
        with self._lock:
            database = self.database
            try:
                committed = database.end_transaction()
            except Exception:
                if not database.in_transaction:
                    self._settle_transaction(committed=False)
                raise
            if not database.in_transaction:
                self._settle_transaction(committed)

    def _settle_transaction(self, committed: bool) -> None:
        inserted, self._inserted = self._inserted, []
        if committed:
            return
        for record in inserted:
            record.id = None
        self.cache.clear()
        logger.debug("runtime.rollback_reset", inserted=len(inserted))

    @property
    def in_transaction(self) -> bool:
        return self.database.in_transaction

    @contextmanager
    def transaction(self) -> Iterator[RecordSpine]:
        """Nested-safe transaction; commits when the outermost block succeeds."""
        with self._lock:
            self.begin_transaction()
            try:
                yield self
                self.set_transaction_successful()
            finally:
                self.end_transaction()

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def exec_sql(self, sql: str, *args: Any) -> None:
        """Run raw SQL with positional arguments."""
        arguments = normalize_arguments(args, self.metadata)
        with self._lock:
            self.database.execute(sql, arguments)

    def select(self, *columns: str | SelectColumn) -> Select:
        return Select(*columns, metadata=self.metadata, executor=self)

    def delete(self) -> Delete:
        return Delete(metadata=self.metadata, executor=self)

    def update(self, record_type: type[Model]) -> Update:
        return Update(record_type, metadata=self.metadata, executor=self)

    # QueryExecutor

    def run_query(self, record_type: type[M], statement: RenderedStatement) -> LazyRecordList[M]:
        with self._lock:
            rows = self.database.query(statement.sql, statement.arguments)
        return LazyRecordList(rows, lambda row: self._hydrate(record_type, row))

    def run_query_single(self, record_type: type[M], statement: RenderedStatement) -> M | None:
        with self._lock:
            rows = self.database.query(statement.sql, statement.arguments)
            if not rows:
                return None
            return self._hydrate(record_type, rows[0])

    def run_mutation(self, record_type: type[Model], statement: RenderedStatement) -> int:
        with self._lock:
            cursor = self.database.execute(statement.sql, statement.arguments)
        self._notify(self.table_name(record_type))
        return getattr(cursor, "rowcount", 0)

    def run_scalar(self, statement: RenderedStatement) -> int:
        with self._lock:
            return self.database.query_int(statement.sql, statement.arguments)

    def _hydrate(self, record_type: type[M], row: Any) -> M:
        with self._lock:
            return hydrate(
                record_type,
                row,
                metadata=self.metadata,
                cache=self.cache,
                loader=self.load,
            )

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def save(self, record: Model) -> int | None:
        """Insert a new record or update a persisted one; returns its id.

        An insert dropped by an ``IGNORE`` conflict policy leaves ``id`` as
        ``None`` and caches nothing.
        """
        record_type = type(record)
        descriptor = self.metadata.descriptor(record_type)
        values = {c.column_name: getattr(record, c.attribute) for c in descriptor.value_columns}

        with self._lock:
            if record.id is None:
                statement = Insert(record_type, metadata=self.metadata).values(values).render()
                cursor = self.database.execute(statement.sql, statement.arguments)
                if cursor.rowcount == 0:
                    logger.warning("record.insert_ignored", table=descriptor.table_name)
                    return None
                record.id = cursor.lastrowid
                if self.database.in_transaction:
                    self._inserted.append(record)
            elif values:
                assignments = ", ".join(f"{name} = ?" for name in values)
                statement = (
                    Update(record_type, metadata=self.metadata)
                    .set(assignments, *values.values())
                    .where(f"{descriptor.primary_key_column_name} = ?", record.id)
                    .render()
                )
                self.database.execute(statement.sql, statement.arguments)
            self.cache.put(record)

        self._notify(descriptor.table_name)
        return record.id

    def delete_record(self, record: Model) -> None:
        """Delete the row of ``record`` and evict it from the cache."""
        record_type = type(record)
        if record.id is None:
            logger.debug("record.delete_unsaved", record_type=record_type.__name__)
            return
        descriptor = self.metadata.descriptor(record_type)
        statement = (
            Delete(metadata=self.metadata)
            .from_(record_type)
            .where(f"{descriptor.primary_key_column_name} = ?", record.id)
            .render()
        )
        with self._lock:
            self.database.execute(statement.sql, statement.arguments)
            self.cache.remove(record)
        self._notify(descriptor.table_name)

    def load(self, record_type: type[M], pk: int) -> M | None:
        """Cached instance for ``pk``, else the row loaded from the database."""
        with self._lock:
            cached = self.cache.get(record_type, pk)
            if cached is not None:
                return cached
            id_column = self.metadata.primary_key_column(record_type)
            statement = (
                Select(metadata=self.metadata)
                .from_(record_type)
                .where(f"{id_column} = ?", pk)
                .render_single()
            )
            return self.run_query_single(record_type, statement)

    def _notify(self, table_name: str) -> None:
        try:
            self._notifier.notify_change(table_name)
        except Exception as e:
            logger.warning("runtime.notify_failed", table=table_name, error=str(e))

    def __repr__(self) -> str:
        state = "initialized" if self.is_initialized else "uninitialized"
        return f"<RecordSpine {state}>"


__all__ = ["RecordSpine"]
