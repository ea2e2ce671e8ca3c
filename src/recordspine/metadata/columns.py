"""Declarative column and table declarations.

Record types describe their schema with class attributes instead of
annotations processed by reflection::

    @table(name="Student")
    class Student(Model):
        name = Column(str, not_null=True, unique=True,
                      on_unique_conflict=ConflictAction.IGNORE)
        age = Column(int, index=True)
        school = Column(School, on_delete=ForeignKeyAction.CASCADE)

``Column`` is a data descriptor: on the class it returns itself (so the
metadata layer can read it), on an instance it returns the stored value.
Declaration order is recorded when the descriptor is created and is the
only ordering the metadata layer relies on.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TypeVar

_creation_counter = itertools.count()

T = TypeVar("T")

DEFAULT_ID_NAME = "Id"


class ConflictAction(str, Enum):
    """SQLite ``ON CONFLICT`` resolution algorithms."""

    ROLLBACK = "ROLLBACK"
    ABORT = "ABORT"
    FAIL = "FAIL"
    IGNORE = "IGNORE"
    REPLACE = "REPLACE"


class ForeignKeyAction(str, Enum):
    """Foreign-key ``ON DELETE`` / ``ON UPDATE`` behaviour."""

    SET_NULL = "SET_NULL"
    SET_DEFAULT = "SET_DEFAULT"
    CASCADE = "CASCADE"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO_ACTION"

    @property
    def sql(self) -> str:
        return self.value.replace("_", " ")


class Column:
    """A persisted field of a record type.

    Args:
        value_type: Python type of the value (``int``, ``str``, a ``Model``
            subclass, an ``Enum``, or any type with a registered serializer).
        name: Column name; defaults to the attribute name.
        length: Optional length rendered as ``TYPE(length)``.
        not_null / on_null_conflict: ``NOT NULL ON CONFLICT <action>``.
        unique / on_unique_conflict: ``UNIQUE ON CONFLICT <action>``.
        unique_groups / on_unique_conflicts: Multi-column ``UNIQUE (...)``
            table constraints; the n-th action applies to the n-th group.
        on_delete / on_update: Foreign-key actions for ``Model`` columns.
        index: Create a single-column index.
        index_groups: Names of composite indexes this column belongs to.
    """

    def __init__(
        self,
        value_type: type,
        *,
        name: str | None = None,
        length: int = -1,
        not_null: bool = False,
        on_null_conflict: ConflictAction = ConflictAction.FAIL,
        unique: bool = False,
        on_unique_conflict: ConflictAction = ConflictAction.FAIL,
        unique_groups: tuple[str, ...] | list[str] = (),
        on_unique_conflicts: tuple[ConflictAction, ...] | list[ConflictAction] = (),
        on_delete: ForeignKeyAction = ForeignKeyAction.NO_ACTION,
        on_update: ForeignKeyAction = ForeignKeyAction.NO_ACTION,
        index: bool = False,
        index_groups: tuple[str, ...] | list[str] = (),
    ) -> None:
        self.value_type = value_type
        self.name = name
        self.length = length
        self.not_null = not_null
        self.on_null_conflict = ConflictAction(on_null_conflict)
        self.unique = unique
        self.on_unique_conflict = ConflictAction(on_unique_conflict)
        self.unique_groups = tuple(unique_groups)
        self.on_unique_conflicts = tuple(ConflictAction(a) for a in on_unique_conflicts)
        self.on_delete = ForeignKeyAction(on_delete)
        self.on_update = ForeignKeyAction(on_update)
        self.index = index
        self.index_groups = tuple(index_groups)

        self.attribute: str | None = None
        self.owner: type | None = None
        self.order = next(_creation_counter)

    def __set_name__(self, owner: type, attribute: str) -> None:
        self.owner = owner
        self.attribute = attribute

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.attribute)

    def __set__(self, instance: Any, value: Any) -> None:
        instance.__dict__[self.attribute] = value

    @property
    def column_name(self) -> str:
        return self.name or self.attribute or ""

    def __repr__(self) -> str:
        owner = self.owner.__name__ if self.owner else "?"
        return f"Column({owner}.{self.attribute}, {self.value_type.__name__})"


@dataclass(frozen=True)
class TableOptions:
    """Table-level declaration attached by :func:`table`."""

    name: str
    id: str = DEFAULT_ID_NAME


def table(name: str, id: str = DEFAULT_ID_NAME) -> Callable[[type[T]], type[T]]:
    """Class decorator naming a record type's table and key column."""

    def decorator(cls: type[T]) -> type[T]:
        # stored in the class's own __dict__ so subclasses do not inherit it
        cls.__recordspine_table__ = TableOptions(name=name, id=id)  # type: ignore[attr-defined]
        return cls

    return decorator


def table_options(record_type: type) -> TableOptions | None:
    """Return the options declared on ``record_type`` itself, if any."""
    return record_type.__dict__.get("__recordspine_table__")


def declared_columns(record_type: type) -> list[Column]:
    """Columns declared directly on ``record_type`` in declaration order."""
    columns = [v for v in vars(record_type).values() if isinstance(v, Column)]
    return sorted(columns, key=lambda c: c.order)


__all__ = [
    "Column",
    "ConflictAction",
    "ForeignKeyAction",
    "TableOptions",
    "table",
    "table_options",
    "declared_columns",
    "DEFAULT_ID_NAME",
]
