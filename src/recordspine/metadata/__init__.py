"""Record declarations, schema descriptors and the metadata registry.

Modules
-------
columns       Column descriptor, @table decorator, conflict/foreign-key actions
model         Model base class (owns the primary key)
serializers   TypeSerializer capability and built-in serializers
descriptor    ColumnDescriptor / SchemaDescriptor derivation
registry      MetadataRegistry (explicit registration + package discovery)
ddl           CREATE TABLE / CREATE INDEX rendering
"""

from recordspine.metadata.columns import (
    Column,
    ConflictAction,
    ForeignKeyAction,
    TableOptions,
    table,
)
from recordspine.metadata.descriptor import ColumnDescriptor, SchemaDescriptor, build_descriptor
from recordspine.metadata.model import Model, is_model_type
from recordspine.metadata.registry import MetadataRegistry
from recordspine.metadata.serializers import TypeSerializer, is_serializer_type

__all__ = [
    "Column",
    "ConflictAction",
    "ForeignKeyAction",
    "TableOptions",
    "table",
    "Model",
    "is_model_type",
    "TypeSerializer",
    "is_serializer_type",
    "ColumnDescriptor",
    "SchemaDescriptor",
    "build_descriptor",
    "MetadataRegistry",
]
