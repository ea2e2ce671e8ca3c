"""DDL rendering for schema descriptors.

Turns a :class:`SchemaDescriptor` into ``CREATE TABLE IF NOT EXISTS`` and
``CREATE INDEX IF NOT EXISTS`` statements. Column affinity comes from the
column's value type:

==========================  ===========
value type                  SQLite type
==========================  ===========
``int``, ``bool``           ``INTEGER``
``float``                   ``REAL``
``str``, ``Enum``           ``TEXT``
``bytes``                   ``BLOB``
``Model`` subclass          ``INTEGER`` (plus ``REFERENCES``)
serialized type             affinity of ``serialized_type``
==========================  ===========
"""

from __future__ import annotations

from enum import Enum

from recordspine.core.errors import SchemaConflict
from recordspine.metadata.descriptor import ColumnDescriptor, SchemaDescriptor, build_descriptor
from recordspine.metadata.model import Model
from recordspine.metadata.registry import MetadataRegistry

SQL_TYPES: dict[type, str] = {
    bool: "INTEGER",
    int: "INTEGER",
    float: "REAL",
    str: "TEXT",
    bytes: "BLOB",
}


def sql_type(value_type: type, metadata: MetadataRegistry) -> str | None:
    """SQLite type name for ``value_type``; ``None`` when it has no mapping."""
    serializer = metadata.serializer_for(value_type)
    if serializer is not None:
        value_type = serializer.serialized_type
    if issubclass(value_type, Model):
        return "INTEGER"
    if issubclass(value_type, Enum):
        return "TEXT"
    for klass in value_type.__mro__:
        if klass in SQL_TYPES:
            return SQL_TYPES[klass]
    return None


def _referenced(value_type: type, metadata: MetadataRegistry) -> SchemaDescriptor:
    if metadata.is_registered(value_type):
        return metadata.descriptor(value_type)
    return build_descriptor(value_type)


def column_definition(
    descriptor: SchemaDescriptor,
    column: ColumnDescriptor,
    metadata: MetadataRegistry,
    *,
    foreign_keys: bool = True,
) -> str:
    if column.primary_key:
        return f"{column.column_name} INTEGER PRIMARY KEY AUTOINCREMENT"

    type_name = sql_type(column.value_type, metadata)
    if type_name is None:
        raise SchemaConflict(
            f"No SQLite type mapping for {column.value_type.__name__}"
        ).with_context(table=descriptor.table_name, column=column.column_name)

    parts = [f"{column.column_name} {type_name}"]
    if column.length > -1:
        parts[0] += f"({column.length})"
    if column.not_null:
        parts.append(f"NOT NULL ON CONFLICT {column.on_null_conflict.value}")
    if column.unique:
        parts.append(f"UNIQUE ON CONFLICT {column.conflict_policy.value}")
    if foreign_keys and column.is_reference:
        target = _referenced(column.value_type, metadata)
        parts.append(
            f"REFERENCES {target.table_name}({target.primary_key_column_name}) "
            f"ON DELETE {column.foreign_key_on_delete.sql} "
            f"ON UPDATE {column.foreign_key_on_update.sql}"
        )
    return " ".join(parts)


def unique_group_definitions(descriptor: SchemaDescriptor) -> list[str]:
    """``UNIQUE (...) ON CONFLICT ...`` table constraints, one per group."""
    groups: dict[str, list[str]] = {}
    actions: dict[str, str] = {}
    for column in descriptor.value_columns:
        for position, group in enumerate(column.unique_groups):
            groups.setdefault(group, []).append(column.column_name)
            if position < len(column.on_unique_conflicts):
                actions[group] = column.on_unique_conflicts[position].value
    return [
        f"UNIQUE ({', '.join(columns)}) ON CONFLICT {actions.get(group, 'FAIL')}"
        for group, columns in groups.items()
    ]


def create_table_definition(
    descriptor: SchemaDescriptor,
    metadata: MetadataRegistry,
    *,
    foreign_keys: bool = True,
) -> str:
    definitions = [
        column_definition(descriptor, column, metadata, foreign_keys=foreign_keys)
        for column in descriptor.columns
    ]
    definitions.extend(unique_group_definitions(descriptor))
    return f"CREATE TABLE IF NOT EXISTS {descriptor.table_name} ({', '.join(definitions)})"


def create_index_definitions(descriptor: SchemaDescriptor) -> list[str]:
    """One index per ``index=True`` column, then one per index group."""
    indexes: dict[str, list[str]] = {}
    for column in descriptor.value_columns:
        if column.indexed:
            indexes.setdefault(column.column_name, []).append(column.column_name)
    for column in descriptor.value_columns:
        for group in column.index_groups:
            indexes.setdefault(group, []).append(column.column_name)

    table = descriptor.table_name
    return [
        f"CREATE INDEX IF NOT EXISTS index_{table}_{name} ON {table}({', '.join(columns)})"
        for name, columns in indexes.items()
    ]


__all__ = [
    "SQL_TYPES",
    "sql_type",
    "column_definition",
    "unique_group_definitions",
    "create_table_definition",
    "create_index_definitions",
]
