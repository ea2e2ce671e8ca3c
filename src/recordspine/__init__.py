"""
recordspine - declarative records over SQLite with an identity cache.

Declare record types, hand them to a :class:`RecordSpine`, and query them
through a fluent builder. The engine derives the schema from the
declarations, creates and migrates the database to the configured version
and guarantees one live instance per persisted row.

Example::

    from recordspine import Column, Configuration, Model, RecordSpine, RecordSpineSettings, table

    @table(name="Student")
    class Student(Model):
        name = Column(str, not_null=True, unique=True)
        age = Column(int)

    with RecordSpine() as spine:
        spine.initialize(Configuration(
            settings=RecordSpineSettings(database_name=":memory:"),
            record_types=[Student],
        ))
        Student(name="Alice", age=30).save(spine)
        adults = spine.select().from_(Student).where("age >= ?", 18).execute()
"""

__version__ = "0.1.0"

from recordspine.cache import IdentityCache
from recordspine.core import (
    Configuration,
    RecordSpineError,
    RecordSpineSettings,
    SqlParserMode,
    SqliteDatabase,
    configure_logging,
    set_logging_enabled,
)
from recordspine.hydration import LazyRecordList
from recordspine.metadata import (
    Column,
    ConflictAction,
    ForeignKeyAction,
    MetadataRegistry,
    Model,
    TypeSerializer,
    table,
)
from recordspine.query import Delete, Insert, RenderedStatement, Select, SelectColumn, Update
from recordspine.runtime import RecordSpine

__all__ = [
    "__version__",
    "RecordSpine",
    "Configuration",
    "RecordSpineSettings",
    "SqlParserMode",
    "SqliteDatabase",
    "RecordSpineError",
    "configure_logging",
    "set_logging_enabled",
    "Model",
    "Column",
    "ConflictAction",
    "ForeignKeyAction",
    "TypeSerializer",
    "table",
    "MetadataRegistry",
    "IdentityCache",
    "LazyRecordList",
    "Select",
    "SelectColumn",
    "Delete",
    "Update",
    "Insert",
    "RenderedStatement",
]
