"""
Record <-> document conversion.

Records go to the store as plain dicts; documents come back as instances of
the repository's record type.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

R = TypeVar("R")


def to_value(value: Any) -> Any:
    """Convert a field value (possibly nested) into a BSON-ready value."""
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_value(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {key: to_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_value(item) for item in value]
    return value


def to_document(record: Any) -> Dict[str, Any]:
    """
    Convert a record into a full document for insert/replace.

    A None _id is dropped so the server assigns one.
    """
    document = to_value(record)
    if not isinstance(document, dict):
        # Plain objects carry their state in __dict__
        document = {key: to_value(item) for key, item in vars(record).items()}
    if "_id" in document and document["_id"] is None:
        del document["_id"]
    return document


def from_document(document: Optional[Dict[str, Any]], record_type: Type[R]) -> Optional[R]:
    """
    Build a record of record_type from a stored document.

    Dataclasses receive only their declared init fields (so _id is dropped
    unless declared); pydantic models validate the whole document.
    Mapping types get the document itself.
    """
    if document is None:
        return None
    if issubclass(record_type, BaseModel):
        return record_type.model_validate(document)
    if dataclasses.is_dataclass(record_type):
        names = {f.name for f in dataclasses.fields(record_type) if f.init}
        return record_type(**{k: v for k, v in document.items() if k in names})
    if issubclass(record_type, Mapping):
        return document if record_type is dict else record_type(document)

    record = record_type.__new__(record_type)
    record.__dict__.update(document)
    return record
