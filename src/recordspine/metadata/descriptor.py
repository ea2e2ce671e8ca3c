"""Schema descriptors: the table/column mapping of one record type.

A :class:`SchemaDescriptor` is a pure function of a record type's
declarations. It never touches the database.

Column order contract
---------------------
The primary key is always the first column. The remaining columns are the
record type's declared fields **in reverse**: the declared-field list is
built by walking the MRO from the record type up to :class:`Model`,
taking each class's own ``Column`` attributes in declaration order, and the
descriptor stores that list reversed. Generated ``CREATE TABLE`` and
``INSERT`` statements follow this order.

Column names are compared case-insensitively, as SQLite does; two fields
resolving to the same name raise :class:`SchemaConflict`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from recordspine.core.errors import SchemaConflict, TypeDiscoveryFailure
from recordspine.metadata.columns import (
    DEFAULT_ID_NAME,
    Column,
    ConflictAction,
    ForeignKeyAction,
    declared_columns,
    table_options,
)
from recordspine.metadata.model import ID_ATTRIBUTE, Model


@dataclass(frozen=True)
class ColumnDescriptor:
    """One physical column of a table."""

    attribute: str
    column_name: str
    value_type: type
    primary_key: bool = False
    length: int = -1
    not_null: bool = False
    on_null_conflict: ConflictAction = ConflictAction.FAIL
    unique: bool = False
    conflict_policy: ConflictAction = ConflictAction.FAIL
    unique_groups: tuple[str, ...] = ()
    on_unique_conflicts: tuple[ConflictAction, ...] = ()
    foreign_key_on_delete: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    foreign_key_on_update: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    indexed: bool = False
    index_groups: tuple[str, ...] = ()

    @property
    def is_reference(self) -> bool:
        """Column stores the id of another record."""
        return isinstance(self.value_type, type) and issubclass(self.value_type, Model)

    @property
    def is_enum(self) -> bool:
        return isinstance(self.value_type, type) and issubclass(self.value_type, Enum)

    @classmethod
    def from_column(cls, column: Column) -> ColumnDescriptor:
        return cls(
            attribute=column.attribute or "",
            column_name=column.column_name,
            value_type=column.value_type,
            length=column.length,
            not_null=column.not_null,
            on_null_conflict=column.on_null_conflict,
            unique=column.unique,
            conflict_policy=column.on_unique_conflict,
            unique_groups=column.unique_groups,
            on_unique_conflicts=column.on_unique_conflicts,
            foreign_key_on_delete=column.on_delete,
            foreign_key_on_update=column.on_update,
            indexed=column.index,
            index_groups=column.index_groups,
        )


@dataclass(frozen=True)
class SchemaDescriptor:
    """Table name, key column and ordered columns of one record type."""

    record_type: type[Model]
    table_name: str
    primary_key_column_name: str
    columns: tuple[ColumnDescriptor, ...] = field(default_factory=tuple)

    @property
    def primary_key(self) -> ColumnDescriptor:
        return self.columns[0]

    @property
    def value_columns(self) -> tuple[ColumnDescriptor, ...]:
        """Every column except the primary key."""
        return self.columns[1:]

    def column(self, attribute: str) -> ColumnDescriptor:
        for column in self.columns:
            if column.attribute == attribute:
                return column
        raise KeyError(f"{self.table_name} has no column for attribute {attribute!r}")

    def column_names(self) -> list[str]:
        return [c.column_name for c in self.columns]


def _declared_fields(record_type: type) -> list[Column]:
    fields: list[Column] = []
    seen: set[str] = set()
    for klass in record_type.__mro__:
        if klass is Model or klass is object:
            break
        for column in declared_columns(klass):
            # a redeclared attribute hides the parent's column
            if column.attribute in seen:
                continue
            seen.add(column.attribute or "")
            fields.append(column)
    return fields


def _find_primary_key_owner(record_type: type) -> type | None:
    """Walk the inheritance chain to the class that owns the key field."""
    for klass in record_type.__mro__:
        if klass is Model:
            return klass
    return None


def build_descriptor(record_type: type) -> SchemaDescriptor:
    """Derive the schema descriptor of ``record_type``.

    Raises:
        TypeDiscoveryFailure: ``record_type`` is not a record type.
        SchemaConflict: two fields resolve to the same column name.
    """
    if not isinstance(record_type, type) or _find_primary_key_owner(record_type) is None:
        raise TypeDiscoveryFailure(
            f"{record_type!r} is not a record type"
        ).with_context(record_type=getattr(record_type, "__name__", repr(record_type)))

    options = table_options(record_type)
    table_name = options.name if options else record_type.__name__
    id_name = options.id if options else DEFAULT_ID_NAME

    columns = [
        ColumnDescriptor(
            attribute=ID_ATTRIBUTE,
            column_name=id_name,
            value_type=int,
            primary_key=True,
        )
    ]
    names = {id_name.casefold(): ID_ATTRIBUTE}

    for column in reversed(_declared_fields(record_type)):
        descriptor = ColumnDescriptor.from_column(column)
        key = descriptor.column_name.casefold()
        if key in names:
            raise SchemaConflict(
                f"Column {descriptor.column_name!r} of {table_name} is declared by both "
                f"{names[key]!r} and {descriptor.attribute!r}"
            ).with_context(
                table=table_name,
                column=descriptor.column_name,
                record_type=record_type.__qualname__,
            )
        names[key] = descriptor.attribute
        columns.append(descriptor)

    return SchemaDescriptor(
        record_type=record_type,
        table_name=table_name,
        primary_key_column_name=id_name,
        columns=tuple(columns),
    )


__all__ = ["ColumnDescriptor", "SchemaDescriptor", "build_descriptor"]
