"""
Metadata registry: schema descriptors and serializers for all record types.

Manifesto:
    Every other component asks the registry the same two questions:
    "what does this record type look like in the database?" and "how do I
    store a value of this type?". The registry answers both from one place,
    built once at startup and read-only afterwards.

    - **Explicit first:** ``register()`` takes a caller-supplied list
    - **Discovery as fallback:** ``discover()`` scans packages with a
      structural check, never a naming convention
    - **Deterministic:** modules and classes are visited in sorted order
    - **Skip and log:** one bad type never aborts the build, except a
      ``SchemaConflict`` which always does

Architecture:
    ::

        register(record_types, serializer_types)
              │                        │
              ▼                        ▼
        build_descriptor(T)     serializer_type()
              │                        │
              ▼                        ▼
        descriptors_by_type      serializers_by_value_type
        {type → SchemaDescriptor} {value type → TypeSerializer}

        discover("myapp.records") ──► walk_packages ──► classify ──► register

Examples:
    >>> registry = MetadataRegistry()
    >>> registry.register([Student])
    >>> registry.table_name(Student)
    'Student'

Tags:
    metadata, registry, schema, discovery, serializers, recordspine

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from collections.abc import Iterable
from types import ModuleType
from typing import Any

from recordspine.core.errors import SchemaConflict, TypeDiscoveryFailure
from recordspine.core.logging import get_logger
from recordspine.metadata.descriptor import SchemaDescriptor, build_descriptor
from recordspine.metadata.model import is_model_type
from recordspine.metadata.serializers import (
    BUILTIN_SERIALIZERS,
    TypeSerializer,
    is_serializer_type,
)

logger = get_logger(__name__)


class MetadataRegistry:
    """Schema descriptors keyed by record type, serializers keyed by value type."""

    def __init__(self) -> None:
        self._descriptors: dict[type, SchemaDescriptor] = {}
        self._serializers: dict[type, TypeSerializer] = {}
        for serializer_type in BUILTIN_SERIALIZERS:
            self._add_serializer(serializer_type)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def register(
        self,
        record_types: Iterable[type] = (),
        serializer_types: Iterable[type] = (),
    ) -> None:
        """Build descriptors for ``record_types`` and instantiate serializers.

        Serializers are registered first so that explicit ones override the
        built-ins before any record type is introspected.

        Raises:
            SchemaConflict: a record type maps two fields to one column.
        """
        for serializer_type in serializer_types:
            self._add_serializer(serializer_type)
        for record_type in record_types:
            self._add_record_type(record_type)

    def discover(self, packages: Iterable[str | ModuleType]) -> None:
        """Register every record and serializer type defined under ``packages``.

        Modules that fail to import are reported as ``TypeDiscoveryFailure``
        and skipped. Only classes defined in the scanned module itself are
        considered, so re-exports are not registered twice.
        """
        record_types: list[type] = []
        serializer_types: list[type] = []

        for module in self._iter_modules(packages):
            for _, obj in sorted(vars(module).items()):
                if not inspect.isclass(obj) or obj.__module__ != module.__name__:
                    continue
                if is_model_type(obj):
                    record_types.append(obj)
                elif is_serializer_type(obj):
                    serializer_types.append(obj)

        logger.info(
            "metadata.discovered",
            record_types=len(record_types),
            serializer_types=len(serializer_types),
        )
        self.register(record_types, serializer_types)

    def _iter_modules(self, packages: Iterable[str | ModuleType]) -> list[ModuleType]:
        modules: dict[str, ModuleType] = {}
        for package in packages:
            root = self._import(package) if isinstance(package, str) else package
            if root is None:
                continue
            modules[root.__name__] = root
            search_path = getattr(root, "__path__", None)
            if search_path is None:
                continue
            names = sorted(
                info.name
                for info in pkgutil.walk_packages(search_path, prefix=root.__name__ + ".")
            )
            for name in names:
                module = self._import(name)
                if module is not None:
                    modules[name] = module
        return [modules[name] for name in sorted(modules)]

    def _import(self, name: str) -> ModuleType | None:
        try:
            return importlib.import_module(name)
        except Exception as e:
            err = TypeDiscoveryFailure(f"Could not import {name}: {e}", cause=e).with_context(
                module=name
            )
            logger.warning("metadata.module_skipped", **err.to_dict())
            return None

    def _add_record_type(self, record_type: type) -> None:
        try:
            descriptor = build_descriptor(record_type)
        except SchemaConflict:
            raise
        except TypeDiscoveryFailure as err:
            logger.warning("metadata.type_skipped", **err.to_dict())
            return
        except Exception as e:
            err = TypeDiscoveryFailure(
                f"Could not introspect {record_type!r}: {e}", cause=e
            ).with_context(record_type=getattr(record_type, "__qualname__", repr(record_type)))
            logger.warning("metadata.type_skipped", **err.to_dict())
            return

        for other in self._descriptors.values():
            if other.record_type is not record_type and other.table_name == descriptor.table_name:
                logger.warning(
                    "metadata.table_shared",
                    table=descriptor.table_name,
                    record_type=record_type.__qualname__,
                    other=other.record_type.__qualname__,
                )
        self._descriptors[record_type] = descriptor
        logger.debug(
            "metadata.type_registered",
            record_type=record_type.__qualname__,
            table=descriptor.table_name,
            columns=len(descriptor.columns),
        )

    def _add_serializer(self, serializer_type: type) -> None:
        try:
            serializer = serializer_type()
            value_type = serializer.deserialized_type
        except Exception as e:
            err = TypeDiscoveryFailure(
                f"Could not instantiate serializer {serializer_type!r}: {e}", cause=e
            ).with_context(record_type=getattr(serializer_type, "__qualname__", repr(serializer_type)))
            logger.warning("metadata.serializer_skipped", **err.to_dict())
            return

        previous = self._serializers.get(value_type)
        if previous is not None and type(previous) is not serializer_type:
            logger.debug(
                "metadata.serializer_overridden",
                value_type=value_type.__name__,
                previous=type(previous).__name__,
                serializer=serializer_type.__name__,
            )
        self._serializers[value_type] = serializer

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def descriptor(self, record_type: type) -> SchemaDescriptor:
        try:
            return self._descriptors[record_type]
        except KeyError:
            raise KeyError(f"{getattr(record_type, '__qualname__', record_type)} is not a registered record type") from None

    def descriptors(self) -> list[SchemaDescriptor]:
        """All descriptors in registration order."""
        return list(self._descriptors.values())

    def record_types(self) -> list[type]:
        return list(self._descriptors)

    def is_registered(self, record_type: type) -> bool:
        return record_type in self._descriptors

    def table_name(self, record_type: type) -> str:
        return self.descriptor(record_type).table_name

    def primary_key_column(self, record_type: type) -> str:
        return self.descriptor(record_type).primary_key_column_name

    def serializer_for(self, value_type: type) -> TypeSerializer | None:
        """Serializer for ``value_type`` or its nearest registered base."""
        for klass in getattr(value_type, "__mro__", (value_type,)):
            serializer = self._serializers.get(klass)
            if serializer is not None:
                return serializer
        return None

    def serializers(self) -> dict[type, TypeSerializer]:
        return dict(self._serializers)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, record_type: Any) -> bool:
        return record_type in self._descriptors

    def __repr__(self) -> str:
        return f"MetadataRegistry(record_types={len(self._descriptors)}, serializers={len(self._serializers)})"


__all__ = ["MetadataRegistry"]
