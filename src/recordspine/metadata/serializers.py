"""Type serializers for values SQLite cannot store natively.

A serializer converts one Python value type to a storable primitive
(``int``, ``float``, ``str`` or ``bytes``) and back. The metadata registry
indexes serializers by ``deserialized_type``; hydration and argument
binding look them up by a value's type or its nearest registered base.

Built-ins cover temporal values, paths, identifiers, decimals and mutable
byte buffers. Applications register their own by subclassing
:class:`TypeSerializer`::

    class PointSerializer(TypeSerializer):
        deserialized_type = Point
        serialized_type = str

        def serialize(self, value):
            return f"{value.x},{value.y}"

        def deserialize(self, value):
            x, y = value.split(",")
            return Point(float(x), float(y))

``None`` is never passed to ``serialize``/``deserialize``; callers handle it.
"""

from __future__ import annotations

import datetime
import decimal
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar


class TypeSerializer(ABC):
    """Base serializer capability."""

    deserialized_type: ClassVar[type]
    serialized_type: ClassVar[type]

    @abstractmethod
    def serialize(self, value: Any) -> Any:
        ...

    @abstractmethod
    def deserialize(self, value: Any) -> Any:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.deserialized_type.__name__} -> {self.serialized_type.__name__})"


class DateTimeSerializer(TypeSerializer):
    deserialized_type = datetime.datetime
    serialized_type = str

    def serialize(self, value: datetime.datetime) -> str:
        return value.isoformat()

    def deserialize(self, value: str) -> datetime.datetime:
        return datetime.datetime.fromisoformat(value)


class DateSerializer(TypeSerializer):
    deserialized_type = datetime.date
    serialized_type = str

    def serialize(self, value: datetime.date) -> str:
        return value.isoformat()

    def deserialize(self, value: str) -> datetime.date:
        return datetime.date.fromisoformat(value)


class TimeSerializer(TypeSerializer):
    deserialized_type = datetime.time
    serialized_type = str

    def serialize(self, value: datetime.time) -> str:
        return value.isoformat()

    def deserialize(self, value: str) -> datetime.time:
        return datetime.time.fromisoformat(value)


class PathSerializer(TypeSerializer):
    deserialized_type = Path
    serialized_type = str

    def serialize(self, value: Path) -> str:
        return str(value)

    def deserialize(self, value: str) -> Path:
        return Path(value)


class UUIDSerializer(TypeSerializer):
    deserialized_type = uuid.UUID
    serialized_type = str

    def serialize(self, value: uuid.UUID) -> str:
        return str(value)

    def deserialize(self, value: str) -> uuid.UUID:
        return uuid.UUID(value)


class DecimalSerializer(TypeSerializer):
    deserialized_type = decimal.Decimal
    serialized_type = str

    def serialize(self, value: decimal.Decimal) -> str:
        return str(value)

    def deserialize(self, value: str) -> decimal.Decimal:
        return decimal.Decimal(value)


class BytearraySerializer(TypeSerializer):
    deserialized_type = bytearray
    serialized_type = bytes

    def serialize(self, value: bytearray) -> bytes:
        return bytes(value)

    def deserialize(self, value: bytes) -> bytearray:
        return bytearray(value)


BUILTIN_SERIALIZERS: tuple[type[TypeSerializer], ...] = (
    DateTimeSerializer,
    DateSerializer,
    TimeSerializer,
    PathSerializer,
    UUIDSerializer,
    DecimalSerializer,
    BytearraySerializer,
)


def is_serializer_type(candidate: Any) -> bool:
    """Structural check: a concrete ``TypeSerializer`` subclass."""
    return (
        isinstance(candidate, type)
        and issubclass(candidate, TypeSerializer)
        and candidate is not TypeSerializer
        and not getattr(candidate, "__abstractmethods__", None)
    )


__all__ = [
    "TypeSerializer",
    "DateTimeSerializer",
    "DateSerializer",
    "TimeSerializer",
    "PathSerializer",
    "UUIDSerializer",
    "DecimalSerializer",
    "BytearraySerializer",
    "BUILTIN_SERIALIZERS",
    "is_serializer_type",
]
