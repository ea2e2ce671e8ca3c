"""``SELECT`` and ``DELETE`` statement heads.

Both are completed by :meth:`QueryBase.from_`, which returns a
:class:`~recordspine.query.from_clause.From` carrying the rest of the
clause machinery::

    Select().from_(Student).where("age > ?", 18).order_by("name")
    Select("name", SelectColumn("age", "years")).distinct().from_(Student)
    Delete().from_(Student).where("name = ?", "Alice")
"""

from __future__ import annotations

from dataclasses import dataclass

from recordspine.metadata.model import Model
from recordspine.query.base import RenderedStatement, Sqlable
from recordspine.query.from_clause import From


@dataclass(frozen=True)
class SelectColumn:
    """Projected column with an alias, rendered as ``name AS alias``."""

    name: str
    alias: str

    def __str__(self) -> str:
        return f"{self.name} AS {self.alias}"


class QueryBase(Sqlable):
    """Statement head that a ``From`` clause completes."""

    is_select = False

    def from_(self, record_type: type[Model]) -> From:
        return From(record_type, self, metadata=self._metadata, executor=self._executor)

    def head(self) -> str:
        raise NotImplementedError

    def render(self) -> RenderedStatement:
        return RenderedStatement(self.head())


class Select(QueryBase):
    is_select = True

    def __init__(self, *columns: str | SelectColumn, **kwargs) -> None:
        super().__init__(**kwargs)
        self._columns = [str(c) for c in columns]
        self._distinct = False
        self._all = False

    def distinct(self) -> Select:
        self._distinct = True
        self._all = False
        return self

    def all(self) -> Select:
        self._distinct = False
        self._all = True
        return self

    def head(self) -> str:
        parts = ["SELECT"]
        if self._distinct:
            parts.append("DISTINCT")
        elif self._all:
            parts.append("ALL")
        parts.append(", ".join(self._columns) if self._columns else "*")
        return " ".join(parts)


class Delete(QueryBase):
    def head(self) -> str:
        return "DELETE"


__all__ = ["QueryBase", "Select", "SelectColumn", "Delete"]
