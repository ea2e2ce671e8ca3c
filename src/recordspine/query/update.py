"""``UPDATE`` and ``INSERT`` statements.

::

    Update(Student).set("age = ?", 31).where("name = ?", "Alice")
    Insert(Student).values({"name": "Alice", "age": 30}).or_conflict(ConflictAction.IGNORE)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from recordspine.metadata.columns import ConflictAction
from recordspine.metadata.model import Model
from recordspine.query.base import RenderedStatement, Sqlable, normalize_arguments


class Update(Sqlable):
    def __init__(self, record_type: type[Model], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._record_type = record_type

    @property
    def record_type(self) -> type[Model]:
        return self._record_type

    def set(self, clause: str, *args: Any) -> Set:
        return Set(self, clause, args)

    def render(self) -> RenderedStatement:
        return RenderedStatement(f"UPDATE {self.table_name(self._record_type)}")


class Set(Sqlable):
    """``SET`` and ``WHERE`` part of an ``UPDATE``."""

    def __init__(self, update: Update, clause: str, args: tuple[Any, ...]) -> None:
        super().__init__(metadata=update.metadata, executor=update._executor)
        self._update = update
        self._set = clause
        self._set_arguments = normalize_arguments(args, self._metadata)
        self._where: list[str] = []
        self._where_arguments: list[Any] = []

    def where(self, clause: str, *args: Any) -> Set:
        return self._chain("AND", clause, args)

    def and_(self, clause: str, *args: Any) -> Set:
        return self._chain("AND", clause, args)

    def or_(self, clause: str, *args: Any) -> Set:
        return self._chain("OR", clause, args)

    def _chain(self, connective: str, clause: str, args: tuple[Any, ...]) -> Set:
        if self._where:
            self._where.append(connective)
        self._where.append(clause)
        self._where_arguments.extend(normalize_arguments(args, self._metadata))
        return self

    @property
    def arguments(self) -> tuple[Any, ...]:
        return (*self._set_arguments, *self._where_arguments)

    def render(self) -> RenderedStatement:
        parts = [self._update.render().sql, f"SET {self._set}"]
        if self._where:
            parts.append("WHERE " + " ".join(self._where))
        return self._statement(parts, self.arguments)

    def execute(self) -> int:
        """Run the update; returns the number of changed rows."""
        return self.require_executor().run_mutation(self._update.record_type, self.render())


class Insert(Sqlable):
    def __init__(self, record_type: type[Model], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._record_type = record_type
        self._values: dict[str, Any] = {}
        self._conflict: ConflictAction | None = None

    def values(self, values: Mapping[str, Any]) -> Insert:
        """Column name → value; insertion order is column order."""
        self._values.update(values)
        return self

    def or_conflict(self, action: ConflictAction) -> Insert:
        self._conflict = ConflictAction(action)
        return self

    @property
    def arguments(self) -> tuple[Any, ...]:
        return tuple(normalize_arguments(self._values.values(), self._metadata))

    def render(self) -> RenderedStatement:
        verb = f"INSERT OR {self._conflict.value} INTO" if self._conflict else "INSERT INTO"
        table = self.table_name(self._record_type)
        if not self._values:
            return self._statement([verb, table, "DEFAULT VALUES"], ())
        columns = ", ".join(self._values)
        placeholders = ", ".join("?" for _ in self._values)
        return self._statement([verb, f"{table} ({columns})", f"VALUES ({placeholders})"], self.arguments)


__all__ = ["Update", "Set", "Insert"]
