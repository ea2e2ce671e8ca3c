"""
Structured error types for recordspine.

Every failure the engine can raise or report carries a category, a
structured context and an optional chained cause, so that the logging
collaborator can render it as key/value pairs instead of a bare string.

Manifesto:
    - **Typed hierarchy:** one class per failure mode named by the engine
    - **Fatal vs recoverable:** schema and bootstrap errors propagate,
      per-type discovery and migration-naming errors are logged and skipped
    - **Rich context:** table, column, version and script name travel with
      the error
    - **Error chaining:** the driver exception is always preserved as cause

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                     RecordSpineError                          │
        │            (category, context, cause, to_dict)                │
        ├──────────────────────────────────────────────────────────────┤
        │  Fatal at initialize          │  Logged and skipped           │
        │  ───────────────────          │  ──────────────────           │
        │  SchemaConflict               │  TypeDiscoveryFailure         │
        │  MigrationExecutionFailure    │  MigrationParseFailure        │
        │  SchemaVersionError           │  AssetCopyFailure             │
        │  InitializationError          │                               │
        ├──────────────────────────────────────────────────────────────┤
        │  Raised to the caller                                         │
        │  StatementExecutionFailure   TransactionError                 │
        │  NotInitializedError                                          │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> err = SchemaConflict("duplicate column").with_context(table="Student", column="name")
    >>> err.to_dict()["context"]
    {'table': 'Student', 'column': 'name'}

Tags:
    error-handling, exception-hierarchy, error-context, recordspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    DATABASE = "DATABASE"
    STORAGE = "STORAGE"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Typed fields cover what the engine knows at the failure site; anything
    else goes into ``metadata``. ``to_dict()`` only emits fields that are set.
    """

    table: str | None = None
    column: str | None = None
    record_type: str | None = None
    version: int | None = None
    script: str | None = None
    sql: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "column", "record_type", "version", "script", "sql", "path"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RecordSpineError(Exception):
    """
    Base exception for all recordspine errors.

    Subclasses set ``default_category``; callers may override it per
    instance. When ``cause`` is given it is also chained as ``__cause__``
    so tracebacks show the driver error.

    Examples:
        >>> err = RecordSpineError("boom")
        >>> err.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> err.to_dict()["error_type"]
        'RecordSpineError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RecordSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaConflict("duplicate column").with_context(
                table="Student",
                column="name",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# METADATA ERRORS
# =============================================================================


class SchemaConflict(RecordSpineError):
    """Two fields of one record type resolve to the same column name.

    Fatal at registry-build time: initialization aborts.
    """

    default_category = ErrorCategory.VALIDATION


class TypeDiscoveryFailure(RecordSpineError):
    """A discovered module or type could not be loaded or instantiated.

    Logged; the type is skipped and the registry build continues.
    """

    default_category = ErrorCategory.INTERNAL


# =============================================================================
# MIGRATION ERRORS
# =============================================================================


class MigrationParseFailure(RecordSpineError):
    """A migration script's version could not be parsed from its name.

    Logged; the script is skipped.
    """

    default_category = ErrorCategory.PARSE


class MigrationExecutionFailure(RecordSpineError):
    """A statement inside a bootstrap or migration phase failed.

    The whole phase transaction is rolled back and the error propagates
    to the caller of ``initialize``.
    """

    default_category = ErrorCategory.DATABASE


class SchemaVersionError(RecordSpineError):
    """The stored schema version is newer than the configured target."""

    default_category = ErrorCategory.DATABASE


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StatementExecutionFailure(RecordSpineError):
    """A rendered statement failed at the storage engine. Never retried."""

    default_category = ErrorCategory.DATABASE


class TransactionError(RecordSpineError):
    """Transaction boundaries were used out of order."""

    default_category = ErrorCategory.DATABASE


class AssetCopyFailure(RecordSpineError):
    """The bundled database asset could not be copied. Logged, non-fatal."""

    default_category = ErrorCategory.STORAGE


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================


class NotInitializedError(RecordSpineError):
    """The registry was used before ``initialize`` or after ``dispose``."""

    default_category = ErrorCategory.CONFIG


class InitializationError(RecordSpineError):
    """Aggregated failure of ``RecordSpine.initialize``.

    ``cause`` holds the underlying error (``SchemaConflict``,
    ``MigrationExecutionFailure``, ...). No partially initialized state is
    left behind.
    """

    default_category = ErrorCategory.CONFIG


__all__ = [
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
