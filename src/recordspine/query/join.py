"""``JOIN`` clauses of a ``From``."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from recordspine.metadata.model import Model
from recordspine.query.base import normalize_arguments

if TYPE_CHECKING:
    from recordspine.query.from_clause import From


class JoinType(str, Enum):
    LEFT = "LEFT"
    OUTER = "OUTER"
    INNER = "INNER"
    CROSS = "CROSS"


class Join:
    """One joined table; ``on()`` and ``using()`` return the owning ``From``."""

    def __init__(self, from_: From, record_type: type[Model], join_type: JoinType | None = None) -> None:
        self._from = from_
        self._record_type = record_type
        self._join_type = join_type
        self._alias: str | None = None
        self._on: str | None = None
        self._using: tuple[str, ...] = ()
        self._arguments: list[Any] = []

    @property
    def record_type(self) -> type[Model]:
        return self._record_type

    @property
    def arguments(self) -> tuple[Any, ...]:
        return tuple(self._arguments)

    def as_(self, alias: str) -> Join:
        self._alias = alias
        return self

    def on(self, clause: str, *args: Any) -> From:
        self._on = clause
        self._arguments.extend(normalize_arguments(args, self._from.metadata))
        return self._from

    def using(self, *columns: str) -> From:
        self._using = columns
        return self._from

    def to_sql(self) -> str:
        parts = []
        if self._join_type is not None:
            parts.append(self._join_type.value)
        parts.append("JOIN")
        parts.append(self._from.table_name(self._record_type))
        if self._alias is not None:
            parts.append(f"AS {self._alias}")
        if self._on is not None:
            parts.append(f"ON {self._on}")
        elif self._using:
            parts.append(f"USING ({', '.join(self._using)})")
        return " ".join(parts)


__all__ = ["Join", "JoinType"]
