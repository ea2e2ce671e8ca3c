"""Fluent SQL builder.

Modules
-------
base          RenderedStatement, argument normalization, Sqlable base
select        Select / Delete heads, SelectColumn
from_clause   From: joins, predicates, grouping, ordering, paging, execution
join          Join, JoinType
update        Update / Set, Insert
"""

from recordspine.query.base import (
    QueryExecutor,
    RenderedStatement,
    normalize_argument,
    normalize_arguments,
)
from recordspine.query.from_clause import From
from recordspine.query.join import Join, JoinType
from recordspine.query.select import Delete, QueryBase, Select, SelectColumn
from recordspine.query.update import Insert, Set, Update

__all__ = [
    "RenderedStatement",
    "QueryExecutor",
    "normalize_argument",
    "normalize_arguments",
    "QueryBase",
    "Select",
    "SelectColumn",
    "Delete",
    "From",
    "Join",
    "JoinType",
    "Update",
    "Set",
    "Insert",
]
