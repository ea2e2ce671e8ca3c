"""Tests for recordspine.core.errors module."""

import pytest

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


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_empty_context_renders_empty_dict(self):
        assert ErrorContext().to_dict() == {}

    def test_only_set_fields_are_rendered(self):
        ctx = ErrorContext(table="Student", version=3)
        assert ctx.to_dict() == {"table": "Student", "version": 3}

    def test_metadata_is_merged(self):
        ctx = ErrorContext(script="2.sql", metadata={"phase": "create_tables"})
        assert ctx.to_dict() == {"script": "2.sql", "phase": "create_tables"}


class TestRecordSpineError:
    """Test the base error."""

    def test_default_category_is_internal(self):
        err = RecordSpineError("boom")
        assert err.category == ErrorCategory.INTERNAL
        assert err.message == "boom"
        assert str(err) == "boom"

    def test_category_override(self):
        err = RecordSpineError("boom", category=ErrorCategory.CONFIG)
        assert err.category == ErrorCategory.CONFIG

    def test_cause_is_chained(self):
        cause = ValueError("bad value")
        err = RecordSpineError("wrapped", cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause

    def test_with_context_sets_known_fields_and_metadata(self):
        err = SchemaConflict("duplicate").with_context(table="Student", column="name", extra=1)
        assert err.context.table == "Student"
        assert err.context.column == "name"
        assert err.context.metadata == {"extra": 1}

    def test_with_context_returns_same_instance(self):
        err = SchemaConflict("duplicate")
        assert err.with_context(table="T") is err

    def test_to_dict(self):
        err = MigrationExecutionFailure("failed", cause=RuntimeError("no such table")).with_context(
            script="2.sql", version=2
        )
        data = err.to_dict()
        assert data == {
            "error_type": "MigrationExecutionFailure",
            "message": "failed",
            "category": "DATABASE",
            "context": {"version": 2, "script": "2.sql"},
            "cause": "no such table",
        }

    def test_to_dict_without_context_or_cause(self):
        data = RecordSpineError("plain").to_dict()
        assert "context" not in data
        assert "cause" not in data

    def test_repr(self):
        assert repr(SchemaConflict("dup")) == "SchemaConflict('dup', category=VALIDATION)"


class TestHierarchy:
    """Every engine failure is a RecordSpineError with the right category."""

    @pytest.mark.parametrize(
        ("error_type", "category"),
        [
            (SchemaConflict, ErrorCategory.VALIDATION),
            (TypeDiscoveryFailure, ErrorCategory.INTERNAL),
            (MigrationParseFailure, ErrorCategory.PARSE),
            (MigrationExecutionFailure, ErrorCategory.DATABASE),
            (SchemaVersionError, ErrorCategory.DATABASE),
            (StatementExecutionFailure, ErrorCategory.DATABASE),
            (TransactionError, ErrorCategory.DATABASE),
            (AssetCopyFailure, ErrorCategory.STORAGE),
            (NotInitializedError, ErrorCategory.CONFIG),
            (InitializationError, ErrorCategory.CONFIG),
        ],
    )
    def test_categories(self, error_type, category):
        err = error_type("x")
        assert isinstance(err, RecordSpineError)
        assert err.category == category

    def test_catchable_as_base(self):
        with pytest.raises(RecordSpineError):
            raise StatementExecutionFailure("no such table: Missing")
