"""recordspine core -- errors, logging, configuration and the storage engine.

Manifesto:
    Everything the ORM layers share but that is not about records:
    how failures are typed, how diagnostics are emitted, how the engine
    is configured and how SQL reaches SQLite.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          RecordSpineError hierarchy (SchemaConflict, ...)
        protocols.py       StorageEngine, ChangeNotifier, MigrationSource

    Layer 2 -- Storage
        sqlite_conn.py     SqliteDatabase (nested transactions, user_version)
        assets.py          First-run copy of a bundled database

    Layer 3 -- Cross-Cutting Concerns
        logging.py         structlog configuration with an on/off switch
        settings.py        RecordSpineSettings (pydantic-settings)
        config.py          Configuration passed to RecordSpine.initialize
"""

from recordspine.core.config import Configuration
from recordspine.core.errors import (
    AssetCopyFailure,
    ErrorCategory,
    ErrorContext,
    InitializationError,
    MigrationExecutionFailure,
    MigrationParseFailure,
    NotInitializedError,
    RecordSpineError,
    SchemaConflict,
    SchemaVersionError,
    StatementExecutionFailure,
    TransactionError,
    TypeDiscoveryFailure,
)
from recordspine.core.logging import (
    LogContext,
    configure_logging,
    get_logger,
    is_logging_enabled,
    set_engine_level,
    set_logging_enabled,
)
from recordspine.core.protocols import (
    ChangeNotifier,
    MigrationSource,
    NullChangeNotifier,
    StorageEngine,
)
from recordspine.core.settings import RecordSpineSettings, SqlParserMode
from recordspine.core.sqlite_conn import SqliteDatabase

__all__ = [
    "Configuration",
    "RecordSpineSettings",
    "SqlParserMode",
    "SqliteDatabase",
    "StorageEngine",
    "ChangeNotifier",
    "MigrationSource",
    "NullChangeNotifier",
    "configure_logging",
    "get_logger",
    "set_logging_enabled",
    "set_engine_level",
    "is_logging_enabled",
    "LogContext",
    "ErrorCategory",
    "ErrorContext",
    "RecordSpineError",
    "SchemaConflict",
    "TypeDiscoveryFailure",
    "MigrationParseFailure",
    "MigrationExecutionFailure",
    "SchemaVersionError",
    "StatementExecutionFailure",
    "TransactionError",
    "AssetCopyFailure",
    "NotInitializedError",
    "InitializationError",
]
