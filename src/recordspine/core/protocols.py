"""
Canonical protocols for recordspine's external collaborators.

The engine depends on a handful of narrow interfaces rather than concrete
classes: the storage engine that executes SQL, the change-notification
hook invoked after mutations, and the source of migration scripts.

Manifesto:
    The ORM core should be testable with fakes and portable to another
    SQLite binding without touching the metadata, cache or query code.
    Protocols define shape, not inheritance.

Architecture:
    ::

        StorageEngine Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ open() / close() / is_open                             │
        │ execute(sql, args)      → cursor (rowcount, lastrowid) │
        │ query(sql, args)        → list of rows (by name)       │
        │ query_int(sql, args)    → int                          │
        │ begin_transaction()     → nested, ref-counted          │
        │ set_transaction_successful()                           │
        │ end_transaction()       → True when it committed       │
        │ version                 → stored schema version        │
        │ foreign_keys_supported  → bool                         │
        └────────────────────────────────────────────────────────┘

        ChangeNotifier:   notify_change(table_name) -> None
        MigrationSource:  list_scripts() -> list[str]; read_script(name) -> str

Tags:
    protocol, storage, migrations, notifications, recordspine
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StorageEngine(Protocol):
    """Transactional SQL-executing engine with a persistent schema version."""

    @property
    def is_open(self) -> bool:
        ...

    @property
    def version(self) -> int:
        """Stored schema version; 0 for a fresh database."""
        ...

    @version.setter
    def version(self, value: int) -> None:
        ...

    @property
    def foreign_keys_supported(self) -> bool:
        ...

    @property
    def in_transaction(self) -> bool:
        ...

    def open(self) -> None:
        ...

    def close(self) -> None:
        ...

    def execute(self, sql: str, args: Sequence[Any] = ()) -> Any:
        """Execute a statement. Returns the driver cursor."""
        ...

    def query(self, sql: str, args: Sequence[Any] = ()) -> list[Any]:
        """Execute a query and return every row; rows support lookup by name."""
        ...

    def query_int(self, sql: str, args: Sequence[Any] = ()) -> int:
        """First column of the first row as an int (0 when there is no row)."""
        ...

    def begin_transaction(self) -> None:
        ...

    def set_transaction_successful(self) -> None:
        ...

    def end_transaction(self) -> bool:
        """Close one level; True only when this call committed the outermost one."""
        ...


@runtime_checkable
class ChangeNotifier(Protocol):
    """Receives "table T changed" after every successful mutation."""

    def notify_change(self, table_name: str) -> None:
        ...


@runtime_checkable
class MigrationSource(Protocol):
    """Ordered, named-by-version collection of migration scripts."""

    def list_scripts(self) -> list[str]:
        """Script names such as ``"3.sql"``. Empty when there are none."""
        ...

    def read_script(self, name: str) -> str:
        ...


class NullChangeNotifier:
    """Default notifier: does nothing."""

    def notify_change(self, table_name: str) -> None:
        return None


__all__ = [
    "StorageEngine",
    "ChangeNotifier",
    "MigrationSource",
    "NullChangeNotifier",
]
