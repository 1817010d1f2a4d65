"""
Field Descriptor Table

Maps each record type to an ordered tuple of FieldDescriptor entries
(field name + accessor). The table is built once per type and cached, so
change sets and identifier lookups never scan attributes ad hoc.

Supported record shapes:
- dataclasses: declared field order
- pydantic models: model_fields order
- types registered with register_fields(): the registered order
- Mapping instances: key insertion order (per instance, not cached)
- plain objects: instance __dict__ order (per instance, not cached)
"""

import dataclasses
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from operator import attrgetter, itemgetter
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from pydantic import BaseModel

from ..common.error_handling import FieldAccessError, FieldNotFoundError


@dataclass(frozen=True)
class FieldDescriptor:
    """A named field and the accessor that reads it from a record."""
    name: str
    getter: Callable[[Any], Any]

    def read(self, record: Any) -> Any:
        """
        Read this field's value from a record.

        Raises:
            FieldAccessError: If the accessor fails
        """
        try:
            return self.getter(record)
        except Exception as e:
            raise FieldAccessError(type(record), self.name, e) from e


FieldTable = Tuple[FieldDescriptor, ...]

_registry: Dict[type, FieldTable] = {}
_registry_lock = threading.Lock()


def register_fields(record_type: type, names: Iterable[str]) -> FieldTable:
    """
    Register the ordered field names of a record type explicitly.

    Overrides discovery for that type. Useful for plain classes, or to
    restrict which attributes take part in change sets.

    Args:
        record_type: The record class
        names: Field names in the order they should be enumerated

    Returns:
        The registered descriptor table
    """
    names = list(names)
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate field names registered for {record_type.__name__}")

    table = tuple(FieldDescriptor(name, attrgetter(name)) for name in names)
    with _registry_lock:
        _registry[record_type] = table
    return table


def unregister_fields(record_type: type) -> None:
    """Drop a type from the table (registered or discovered)."""
    with _registry_lock:
        _registry.pop(record_type, None)


def _discover(record_type: type) -> Optional[FieldTable]:
    if dataclasses.is_dataclass(record_type):
        names = [f.name for f in dataclasses.fields(record_type)]
    elif issubclass(record_type, BaseModel):
        names = list(record_type.model_fields)
    else:
        return None
    return tuple(FieldDescriptor(name, attrgetter(name)) for name in names)


def describe_type(record_type: type) -> Optional[FieldTable]:
    """
    Get the cached descriptor table for a type with a declared schema.

    Returns:
        The descriptor table, or None for types without declared fields
        (mappings and plain objects are described per instance)
    """
    table = _registry.get(record_type)
    if table is not None:
        return table

    table = _discover(record_type)
    if table is None:
        return None

    with _registry_lock:
        return _registry.setdefault(record_type, table)


def describe(record: Any) -> FieldTable:
    """
    Get the ordered field descriptors of a record instance.

    Raises:
        TypeError: If the record has no enumerable fields
    """
    table = describe_type(type(record))
    if table is not None:
        return table

    if isinstance(record, Mapping):
        return tuple(FieldDescriptor(key, itemgetter(key)) for key in record)

    if hasattr(record, "__dict__"):
        return tuple(FieldDescriptor(name, attrgetter(name)) for name in vars(record))

    raise TypeError(
        f"Cannot enumerate fields of {type(record).__name__}; "
        f"use a dataclass, a pydantic model, a mapping, or register_fields()"
    )


def find_field(record: Any, name: str) -> Optional[FieldDescriptor]:
    """Look up a single descriptor by name, or None if not declared."""
    for descriptor in describe(record):
        if descriptor.name == name:
            return descriptor
    return None


def read_field(record: Any, name: str) -> Any:
    """
    Read a declared field's value from a record.

    Raises:
        FieldNotFoundError: If the field is not declared on the record
        FieldAccessError: If the field is declared but unreadable
    """
    descriptor = find_field(record, name)
    if descriptor is None:
        raise FieldNotFoundError(type(record), name)
    return descriptor.read(record)
