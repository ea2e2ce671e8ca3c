"""
The ``FROM`` clause and everything after it.

Manifesto:
    A query is built by chaining calls, never by concatenating strings by
    hand. The builder accumulates clause state; rendering reads that state
    and never changes it, so one builder renders the full, ``COUNT(*)``
    and ``EXISTS`` variants of the same predicate.

    - **Call order:** ``where``/``and_``/``or_`` join fragments with
      ``AND``/``OR`` exactly in the order they were called
    - **Positional binding:** arguments are normalized when added and
      emitted in clause order (joins, then ``WHERE``, then ``HAVING``)
    - **Pure rendering:** ``render()`` is idempotent
    - **Explicit execution:** ``fetch_one()`` for selects, ``delete_one()``
      for deletes; the wrong one raises ``TypeError``

Architecture:
    ::

        Select(...) ─┐
        Delete()   ──┴─ from_(Type) ──► From
                                         ├── joins: [Join]
                                         ├── where / group by / having
                                         ├── order by / limit / offset
                                         │
                                         ├── render()         SELECT ... / DELETE ...
                                         ├── render_count()   SELECT COUNT(*) ...
                                         ├── render_exists()  SELECT EXISTS(SELECT 1 ...)
                                         │
                                         └── execute() / fetch_one() / delete_one()
                                             count() / exists()   (bound builders)

Examples:
    >>> q = Select().from_(Student).where("age > ?", 18).or_("active = ?", True)
    >>> q.render()
    RenderedStatement(sql='SELECT * FROM Student WHERE age > ? OR active = ?', arguments=(18, 1))
    >>> q.render_count().sql
    'SELECT COUNT(*) FROM Student WHERE age > ? OR active = ?'

Tags:
    sql-builder, query, fluent-api, recordspine

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from recordspine.metadata.model import Model
from recordspine.query.base import RenderedStatement, Sqlable, normalize_arguments
from recordspine.query.join import Join, JoinType

if TYPE_CHECKING:
    from recordspine.hydration import LazyRecordList
    from recordspine.query.select import QueryBase


class From(Sqlable):
    def __init__(self, record_type: type[Model], query_base: QueryBase, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._record_type = record_type
        self._query_base = query_base
        self._alias: str | None = None
        self._joins: list[Join] = []
        self._where: list[str] = []
        self._where_arguments: list[Any] = []
        self._group_by: str | None = None
        self._having: str | None = None
        self._having_arguments: list[Any] = []
        self._order_by: str | None = None
        self._limit: str | None = None
        self._offset: str | None = None

    @property
    def record_type(self) -> type[Model]:
        return self._record_type

    @property
    def is_select(self) -> bool:
        return self._query_base.is_select

    # ------------------------------------------------------------------
    # Clause state
    # ------------------------------------------------------------------

    def as_(self, alias: str) -> From:
        self._alias = alias
        return self

    def _add_join(self, record_type: type[Model], join_type: JoinType | None) -> Join:
        join = Join(self, record_type, join_type)
        self._joins.append(join)
        return join

    def join(self, record_type: type[Model]) -> Join:
        return self._add_join(record_type, None)

    def left_join(self, record_type: type[Model]) -> Join:
        return self._add_join(record_type, JoinType.LEFT)

    def outer_join(self, record_type: type[Model]) -> Join:
        return self._add_join(record_type, JoinType.OUTER)

    def inner_join(self, record_type: type[Model]) -> Join:
        return self._add_join(record_type, JoinType.INNER)

    def cross_join(self, record_type: type[Model]) -> Join:
        return self._add_join(record_type, JoinType.CROSS)

    def where(self, clause: str, *args: Any) -> From:
        """Add a predicate, chained to the previous one with ``AND``."""
        return self._chain("AND", clause, args)

    def and_(self, clause: str, *args: Any) -> From:
        return self._chain("AND", clause, args)

    def or_(self, clause: str, *args: Any) -> From:
        return self._chain("OR", clause, args)

    def _chain(self, connective: str, clause: str, args: tuple[Any, ...]) -> From:
        if self._where:
            self._where.append(connective)
        self._where.append(clause)
        self._where_arguments.extend(normalize_arguments(args, self._metadata))
        return self

    def group_by(self, group_by: str) -> From:
        self._group_by = group_by
        return self

    def having(self, having: str, *args: Any) -> From:
        self._having = having
        self._having_arguments = normalize_arguments(args, self._metadata)
        return self

    def order_by(self, order_by: str) -> From:
        self._order_by = order_by
        return self

    def limit(self, limit: int | str) -> From:
        self._limit = str(limit)
        return self

    def offset(self, offset: int | str) -> From:
        self._offset = str(offset)
        return self

    @property
    def arguments(self) -> tuple[Any, ...]:
        args: list[Any] = []
        for join in self._joins:
            args.extend(join.arguments)
        args.extend(self._where_arguments)
        args.extend(self._having_arguments)
        return tuple(args)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _clauses(self, *, order: bool = True, limit: str | None = None) -> list[str]:
        parts = [f"FROM {self.table_name(self._record_type)}"]
        if self._alias is not None:
            parts.append(f"AS {self._alias}")
        parts.extend(join.to_sql() for join in self._joins)
        if self._where:
            parts.append("WHERE " + " ".join(self._where))
        if self._group_by is not None:
            parts.append(f"GROUP BY {self._group_by}")
        if self._having is not None:
            parts.append(f"HAVING {self._having}")
        if order and self._order_by is not None:
            parts.append(f"ORDER BY {self._order_by}")
        limit = limit if limit is not None else self._limit
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if self._offset is not None:
            parts.append(f"OFFSET {self._offset}")
        return parts

    def render(self) -> RenderedStatement:
        return self._statement([self._query_base.head(), *self._clauses()], self.arguments)

    def render_count(self) -> RenderedStatement:
        return self._statement(["SELECT COUNT(*)", *self._clauses(order=False)], self.arguments)

    def render_exists(self) -> RenderedStatement:
        sql = " ".join(["SELECT EXISTS(SELECT 1", *self._clauses(order=False)]) + ")"
        return self._statement([sql], self.arguments)

    def render_single(self) -> RenderedStatement:
        """The full statement limited to one row; builder state is unchanged."""
        return self._statement([self._query_base.head(), *self._clauses(limit="1")], self.arguments)

    def _render_one_row(self) -> RenderedStatement:
        source = self._alias or self.table_name(self._record_type)
        return self._statement([f"SELECT {source}.*", *self._clauses(limit="1")], self.arguments)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self) -> LazyRecordList | None:
        """Run the statement.

        Selects return a lazily hydrated list of records. Mutations return
        ``None`` and notify the change collaborator for the table.
        """
        executor = self.require_executor()
        if self.is_select:
            return executor.run_query(self._record_type, self.render())
        executor.run_mutation(self._record_type, self.render())
        return None

    def fetch_one(self) -> Model | None:
        """First matching record, or ``None``."""
        if not self.is_select:
            raise TypeError("fetch_one() requires a Select; use delete_one() on a Delete")
        return self.require_executor().run_query_single(self._record_type, self.render_single())

    def delete_one(self) -> None:
        """Load at most one matching record and delete that instance."""
        if self.is_select:
            raise TypeError("delete_one() requires a Delete; use fetch_one() on a Select")
        executor = self.require_executor()
        record = executor.run_query_single(self._record_type, self._render_one_row())
        if record is not None:
            executor.delete_record(record)

    def count(self) -> int:
        return self.require_executor().run_scalar(self.render_count())

    def exists(self) -> bool:
        return self.require_executor().run_scalar(self.render_exists()) != 0

    def __repr__(self) -> str:
        return f"From({self.to_sql()!r})"


__all__ = ["From"]
