"""Shared pieces of the SQL builder.

``RenderedStatement`` is the immutable output of every builder. Argument
normalization turns Python values into primitives SQLite can bind:

- ``bool`` becomes ``1``/``0``
- a ``Model`` instance becomes its id
- an ``Enum`` member becomes its name
- a value with a registered serializer becomes the serialized primitive
- ``int``, ``float``, ``str``, ``bytes`` and ``None`` pass through
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from recordspine.core.errors import NotInitializedError
from recordspine.core.logging import get_logger
from recordspine.metadata.descriptor import build_descriptor
from recordspine.metadata.model import Model

if TYPE_CHECKING:
    from recordspine.hydration import LazyRecordList
    from recordspine.metadata.registry import MetadataRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderedStatement:
    """SQL text plus positional arguments, ready for execution."""

    sql: str
    arguments: tuple[Any, ...] = ()

    def __str__(self) -> str:
        return self.sql


class QueryExecutor(Protocol):
    """What bound builders need from the runtime to execute themselves."""

    def run_query(self, record_type: type[Model], statement: RenderedStatement) -> LazyRecordList: ...

    def run_query_single(self, record_type: type[Model], statement: RenderedStatement) -> Model | None: ...

    def run_mutation(self, record_type: type[Model], statement: RenderedStatement) -> int: ...

    def run_scalar(self, statement: RenderedStatement) -> int: ...

    def delete_record(self, record: Model) -> None: ...


def normalize_argument(value: Any, metadata: MetadataRegistry | None = None) -> Any:
    """Convert ``value`` to a primitive SQLite can bind."""
    if value is None:
        return None
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, Model):
        return value.id
    if isinstance(value, Enum):
        return value.name
    if metadata is not None:
        serializer = metadata.serializer_for(type(value))
        if serializer is not None:
            return normalize_argument(serializer.serialize(value))
    return value


def normalize_arguments(values: Iterable[Any], metadata: MetadataRegistry | None = None) -> list[Any]:
    return [normalize_argument(v, metadata) for v in values]


class Sqlable:
    """Base of every builder: metadata lookup plus optional executor."""

    def __init__(
        self,
        *,
        metadata: MetadataRegistry | None = None,
        executor: QueryExecutor | None = None,
    ) -> None:
        self._metadata = metadata
        self._executor = executor

    @property
    def metadata(self) -> MetadataRegistry | None:
        return self._metadata

    def table_name(self, record_type: type[Model]) -> str:
        if self._metadata is not None:
            return self._metadata.table_name(record_type)
        return build_descriptor(record_type).table_name

    def require_executor(self) -> QueryExecutor:
        if self._executor is None:
            raise NotInitializedError(
                f"{type(self).__name__} is not bound to a RecordSpine; "
                "create it with spine.select()/delete()/update()"
            )
        return self._executor

    def to_sql(self) -> str:
        return self.render().sql

    def render(self) -> RenderedStatement:
        raise NotImplementedError

    def _statement(self, parts: Sequence[str], arguments: Sequence[Any]) -> RenderedStatement:
        sql = " ".join(p for p in parts if p)
        statement = RenderedStatement(sql=sql, arguments=tuple(arguments))
        logger.debug("query.rendered", sql=sql, arguments=list(statement.arguments))
        return statement


__all__ = [
    "RenderedStatement",
    "QueryExecutor",
    "Sqlable",
    "normalize_argument",
    "normalize_arguments",
]
