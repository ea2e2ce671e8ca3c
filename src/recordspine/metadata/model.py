"""Base persisted-record capability.

Every record type subclasses :class:`Model`. The base owns the primary key
(``id``), which applications never declare themselves; the column name it
maps to comes from :func:`~recordspine.metadata.columns.table` and
defaults to ``"Id"``.

Persistence goes through an explicit :class:`~recordspine.runtime.RecordSpine`
instance rather than ambient global state::

    spine = RecordSpine()
    spine.initialize(config)

    alice = Student(name="Alice", age=30)
    alice.save(spine)
    assert Student.load(spine, alice.id) is alice

Intermediate base classes that should not become tables set
``__abstract__ = True`` in their own body.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from recordspine.metadata.columns import Column

if TYPE_CHECKING:
    from recordspine.runtime import RecordSpine

M = TypeVar("M", bound="Model")

ID_ATTRIBUTE = "id"


class Model:
    """Base class of all record types."""

    __abstract__ = True

    def __init__(self, **values: Any) -> None:
        self.id: int | None = None
        for key, value in values.items():
            if not isinstance(getattr(type(self), key, None), Column):
                raise TypeError(f"{type(self).__name__} has no column attribute {key!r}")
            setattr(self, key, value)

    # -- persistence -------------------------------------------------------

    def save(self, spine: RecordSpine) -> int | None:
        """Insert or update this record; returns its id."""
        return spine.save(self)

    def delete(self, spine: RecordSpine) -> None:
        spine.delete_record(self)

    @classmethod
    def load(cls: type[M], spine: RecordSpine, pk: int) -> M | None:
        """Cached instance for ``pk``, loading it from the database on a miss."""
        return spine.load(cls, pk)

    # -- identity ----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return self.id is not None and self.id == other.id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        if self.id is None:
            return id(self)
        return hash((type(self), self.id))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"


def is_model_type(candidate: Any) -> bool:
    """Structural check: a concrete ``Model`` subclass."""
    return (
        isinstance(candidate, type)
        and issubclass(candidate, Model)
        and not candidate.__dict__.get("__abstract__", False)
    )


__all__ = ["Model", "is_model_type", "ID_ATTRIBUTE"]
