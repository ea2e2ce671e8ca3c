"""Row hydration and result materialization.

A row becomes a record instance by reading every descriptor column **by
name** (so ``SELECT *`` column order never matters) and converting the
stored primitive back to the field's value type:

- ``bool`` fields from ``0``/``1``
- ``Enum`` fields from the member name
- ``Model`` fields through ``loader(type, id)``, which returns the cached
  live instance or loads it
- serialized fields through the registered :class:`TypeSerializer`

Hydrated instances are installed into the identity cache, replacing any
instance already cached for the same row. The instance is installed before
its references are resolved, so rows that reference each other (or
themselves) resolve to the same live instances instead of recursing.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from enum import Enum
from typing import Any, Generic, TypeVar, overload

from recordspine.cache import IdentityCache
from recordspine.core.logging import get_logger
from recordspine.metadata.descriptor import ColumnDescriptor
from recordspine.metadata.model import Model
from recordspine.metadata.registry import MetadataRegistry

logger = get_logger(__name__)

M = TypeVar("M", bound=Model)

Loader = Callable[[type[Model], int], "Model | None"]


def _row_keys(row: Any) -> dict[str, str]:
    keys = row.keys() if hasattr(row, "keys") else ()
    return {k.casefold(): k for k in keys}


def _convert(column: ColumnDescriptor, value: Any, metadata: MetadataRegistry) -> Any:
    if value is None:
        return None
    value_type = column.value_type
    if column.primary_key:
        return int(value)
    if value_type is bool:
        return bool(value)
    if column.is_enum:
        return value_type[value]
    serializer = metadata.serializer_for(value_type)
    if serializer is not None:
        return serializer.deserialize(value)
    if value_type is float and isinstance(value, int):
        return float(value)
    return value


def hydrate(
    record_type: type[M],
    row: Mapping[str, Any],
    *,
    metadata: MetadataRegistry,
    cache: IdentityCache | None = None,
    loader: Loader | None = None,
) -> M:
    """Build a ``record_type`` instance from ``row``.

    Columns missing from the row are left unset (``None``).
    """
    descriptor = metadata.descriptor(record_type)
    available = _row_keys(row)

    record = record_type.__new__(record_type)
    record.id = None
    references: list[tuple[ColumnDescriptor, Any]] = []

    for column in descriptor.columns:
        key = available.get(column.column_name.casefold())
        if key is None:
            if not column.primary_key:
                setattr(record, column.attribute, None)
            continue
        raw = row[key]
        if column.is_reference:
            setattr(record, column.attribute, None)
            if raw is not None:
                references.append((column, raw))
            continue
        setattr(record, column.attribute, _convert(column, raw, metadata))

    if cache is not None and record.id is not None:
        cache.put(record)

    for column, raw in references:
        target = loader(column.value_type, int(raw)) if loader is not None else None
        if target is None:
            logger.debug(
                "hydration.dangling_reference",
                table=descriptor.table_name,
                column=column.column_name,
                id=raw,
            )
        setattr(record, column.attribute, target)

    return record


class LazyRecordList(Sequence, Generic[M]):
    """Rows of a select, hydrated on first access of each item."""

    def __init__(self, rows: Sequence[Any], hydrator: Callable[[Any], M]) -> None:
        self._rows = list(rows)
        self._hydrator = hydrator
        self._items: dict[int, M] = {}

    def __len__(self) -> int:
        return len(self._rows)

    @overload
    def __getitem__(self, index: int) -> M: ...

    @overload
    def __getitem__(self, index: slice) -> list[M]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self._rows)))]
        if index < 0:
            index += len(self._rows)
        if not 0 <= index < len(self._rows):
            raise IndexError("record index out of range")
        if index not in self._items:
            self._items[index] = self._hydrator(self._rows[index])
        return self._items[index]

    def __iter__(self) -> Iterator[M]:
        for i in range(len(self._rows)):
            yield self[i]

    @property
    def materialized(self) -> int:
        """How many rows have been hydrated so far."""
        return len(self._items)

    def first(self) -> M | None:
        return self[0] if self._rows else None

    def to_list(self) -> list[M]:
        return list(self)

    def __repr__(self) -> str:
        return f"LazyRecordList(rows={len(self._rows)}, materialized={len(self._items)})"


__all__ = ["hydrate", "LazyRecordList", "Loader"]
