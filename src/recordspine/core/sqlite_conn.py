"""SQLite storage engine.

Wraps a raw :class:`sqlite3.Connection` to satisfy the
:class:`~recordspine.core.protocols.StorageEngine` protocol: positional
statements, name-addressable rows, explicit (nested) transactions and the
``PRAGMA user_version`` schema version.

The connection runs with ``isolation_level=None`` so that the driver never
opens transactions behind our back; ``BEGIN``/``COMMIT``/``ROLLBACK`` are
issued only by :meth:`SqliteDatabase.begin_transaction` and
:meth:`SqliteDatabase.end_transaction`.

Nested transactions are reference counted. Only the outermost level talks
to SQLite; every level must call :meth:`set_transaction_successful` before
:meth:`end_transaction`, otherwise the outermost level rolls back::

    db = SqliteDatabase(":memory:")
    db.open()
    with db.transaction():
        db.execute("CREATE TABLE t (id INTEGER)")
        with db.transaction():          # joins the outer transaction
            db.execute("INSERT INTO t VALUES (?)", (1,))
    db.query("SELECT * FROM t")[0]["id"]   # 1
    db.close()
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from recordspine.core.errors import StatementExecutionFailure, TransactionError
from recordspine.core.logging import get_logger

logger = get_logger(__name__)

# PRAGMA foreign_keys is honoured from SQLite 3.6.19 on.
FOREIGN_KEYS_MIN_VERSION = (3, 6, 19)


class SqliteDatabase:
    """Adapter: ``sqlite3.Connection`` → ``StorageEngine`` protocol."""

    def __init__(self, path: str | Path = ":memory:") -> None:
        self._path = str(path)
        self._conn: sqlite3.Connection | None = None
        # one "marked successful" flag per open transaction level
        self._levels: list[bool] = []
        self._all_successful = True

    # -- lifecycle ---------------------------------------------------------

    def open(self) -> None:
        if self._conn is not None:
            return
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            self._path,
            check_same_thread=False,
            isolation_level=None,
        )
        self._conn.row_factory = sqlite3.Row
        logger.debug("database.opened", path=self._path)

    def close(self) -> None:
        if self._conn is None:
            return
        if self._levels:
            logger.warning("database.closed_in_transaction", depth=len(self._levels))
            self._conn.execute("ROLLBACK")
            self._levels.clear()
        self._conn.close()
        self._conn = None
        logger.debug("database.closed", path=self._path)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def path(self) -> str:
        return self._path

    # -- statements --------------------------------------------------------

    def execute(self, sql: str, args: Sequence[Any] = ()) -> sqlite3.Cursor:
        conn = self._require_open()
        try:
            return conn.execute(sql, tuple(args))
        except sqlite3.Error as e:
            raise StatementExecutionFailure(
                f"Statement failed: {e}", cause=e
            ).with_context(sql=sql) from e

    def query(self, sql: str, args: Sequence[Any] = ()) -> list[sqlite3.Row]:
        return self.execute(sql, args).fetchall()

    def query_int(self, sql: str, args: Sequence[Any] = ()) -> int:
        row = self.execute(sql, args).fetchone()
        if row is None or row[0] is None:
            return 0
        return int(row[0])

    # -- transactions ------------------------------------------------------

    def begin_transaction(self) -> None:
        self._require_open()
        if not self._levels:
            self.execute("BEGIN")
            self._all_successful = True
        self._levels.append(False)

    def set_transaction_successful(self) -> None:
        if not self._levels:
            raise TransactionError("No transaction is open")
        self._levels[-1] = True

    def end_transaction(self) -> bool:
        """Close one level; True only when this call committed the outermost one.

        A failed ``COMMIT`` is rolled back before the error propagates, so
        the connection never stays inside an orphaned transaction.
        """
        self._require_open()
        if not self._levels:
            raise TransactionError("end_transaction() without begin_transaction()")
        if not self._levels.pop():
            self._all_successful = False
        if self._levels:
            return False
        if not self._all_successful:
            self.execute("ROLLBACK")
            logger.debug("transaction.rolled_back", path=self._path)
            return False
        try:
            self.execute("COMMIT")
        except StatementExecutionFailure:
            self._rollback_failed_commit()
            raise
        return True

    def _rollback_failed_commit(self) -> None:
        conn = self._require_open()
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        logger.warning("transaction.commit_failed", path=self._path)

    @property
    def in_transaction(self) -> bool:
        return bool(self._levels)

    @property
    def transaction_depth(self) -> int:
        return len(self._levels)

    @contextmanager
    def transaction(self) -> Iterator[SqliteDatabase]:
        """Run a block in a (possibly nested) transaction."""
        self.begin_transaction()
        try:
            yield self
            self.set_transaction_successful()
        finally:
            self.end_transaction()

    # -- metadata ----------------------------------------------------------

    @property
    def version(self) -> int:
        return self.query_int("PRAGMA user_version")

    @version.setter
    def version(self, value: int) -> None:
        self.execute(f"PRAGMA user_version = {int(value)}")

    @property
    def foreign_keys_supported(self) -> bool:
        return sqlite3.sqlite_version_info >= FOREIGN_KEYS_MIN_VERSION

    @property
    def raw(self) -> sqlite3.Connection:
        """Access the underlying ``sqlite3.Connection`` (e.g. for pragmas)."""
        return self._require_open()

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StatementExecutionFailure("Database is not open").with_context(
                path=self._path
            )
        return self._conn

    def __repr__(self) -> str:
        return f"SqliteDatabase({self._path!r}, open={self.is_open})"


__all__ = ["SqliteDatabase", "FOREIGN_KEYS_MIN_VERSION"]
