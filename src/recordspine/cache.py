"""
Identity cache: at most one live instance per persisted row.

Manifesto:
    Two queries that return the same row must hand the application the
    same object, otherwise edits made through one reference are silently
    lost through the other. The identity cache guarantees that for every
    row currently held in memory.

    - **Keyed by row:** ``"<table>@<primary key>"``, independent of the query
    - **Bounded LRU:** fixed capacity, least-recently-used entry evicted first
    - **Pure lookup:** a miss returns ``None``; loading is the caller's job
    - **No I/O:** eviction only drops the in-memory reference

Architecture:
    ::

        IdentityCache
        ├── _entries: OrderedDict[key → record]   (oldest first)
        ├── _lock:    RLock shared with RecordSpine
        └── _metadata: MetadataRegistry           (table name lookup)

        put(record)          → move to end, evict oldest beyond capacity
        get(type, pk)        → move to end on hit
        remove(record)       → drop key
        clear()              → drop all keys (database stays open)

Examples:
    >>> cache = IdentityCache(registry, capacity=2)
    >>> cache.put(alice)
    >>> cache.get(Student, alice.id) is alice
    True

Tags:
    cache, identity-map, lru, thread-safe, recordspine

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import TypeVar

from recordspine.core.logging import get_logger
from recordspine.core.settings import DEFAULT_CACHE_SIZE
from recordspine.metadata.model import Model
from recordspine.metadata.registry import MetadataRegistry

logger = get_logger(__name__)

M = TypeVar("M", bound=Model)


class IdentityCache:
    """Bounded LRU map from ``table@pk`` to the live record instance.

    Every operation runs under ``lock``. Pass the facade's lock so that
    cache mutations never interleave with database access.
    """

    def __init__(
        self,
        metadata: MetadataRegistry,
        capacity: int = DEFAULT_CACHE_SIZE,
        lock: threading.RLock | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._metadata = metadata
        self._capacity = capacity
        self._lock = lock or threading.RLock()
        self._entries: OrderedDict[str, Model] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def key(self, record_type: type[Model], pk: object) -> str:
        return f"{self._metadata.table_name(record_type)}@{pk}"

    def put(self, record: Model) -> None:
        """Install ``record`` as the live instance for its row.

        Records without an id are not cached.
        """
        if record.id is None:
            return
        key = self.key(type(record), record.id)
        with self._lock:
            self._entries[key] = record
            self._entries.move_to_end(key)
            while len(self._entries) > self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("cache.evicted", key=evicted)

    def get(self, record_type: type[M], pk: object) -> M | None:
        key = self.key(record_type, pk)
        with self._lock:
            record = self._entries.get(key)
            if record is None:
                return None
            self._entries.move_to_end(key)
            return record  # type: ignore[return-value]

    def remove(self, record: Model) -> None:
        if record.id is None:
            return
        key = self.key(type(record), record.id)
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
        logger.debug("cache.cleared", entries=size)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, record: object) -> bool:
        if not isinstance(record, Model) or record.id is None:
            return False
        key = self.key(type(record), record.id)
        with self._lock:
            return self._entries.get(key) is record

    def __repr__(self) -> str:
        return f"IdentityCache(size={len(self._entries)}, capacity={self._capacity})"


__all__ = ["IdentityCache"]
