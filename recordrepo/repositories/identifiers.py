"""
Identifier resolution.

Turns the identifier field of a record into the value used to match a
single document: UUIDs as-is, canonical UUID strings parsed to UUID,
anything else unchanged.

Records are stored with identifiers exactly as they declare them, so a
canonical UUID string may live in the store either as a UUID or as a
string. match_identifier() builds a filter that finds both.
"""

import logging
import re
from typing import Any, Dict
from uuid import UUID

from ..common.error_handling import FieldNotFoundError
from .fields import read_field

logger = logging.getLogger(__name__)

# Canonical hyphenated form only (8-4-4-4-12 hex)
_CANONICAL_UUID = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


def coerce_identifier(value: Any) -> Any:
    """
    Coerce an identifier value for matching.

    Args:
        value: Raw identifier value

    Returns:
        UUID for UUIDs and canonical UUID strings, value unchanged otherwise
    """
    if isinstance(value, UUID):
        return value
    if isinstance(value, str) and _CANONICAL_UUID.fullmatch(value):
        return UUID(value)
    return value


def match_identifier(field: str, value: Any) -> Dict[str, Any]:
    """
    Build the filter selecting documents whose `field` holds `value`.

    UUID identifiers match the native UUID and its string spellings;
    any other value is matched exactly.
    """
    identifier = coerce_identifier(value)
    if not isinstance(identifier, UUID):
        return {field: identifier}

    forms = [identifier, str(identifier)]
    if isinstance(value, str) and value not in forms:
        forms.append(value)
    return {field: {"$in": forms}}


class IdentifierResolver:
    """
    Resolves the identifier value of a record.

    strict=True (default) raises FieldNotFoundError for undeclared fields.
    strict=False returns None instead, and the repository skips the write.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict

    def read(self, field: str, record: Any) -> Any:
        """
        Read the raw value of `field`, applying the missing-field policy.

        Raises:
            FieldNotFoundError: If the field is not declared (strict mode)
            FieldAccessError: If the field is declared but unreadable
        """
        try:
            return read_field(record, field)
        except FieldNotFoundError:
            if self.strict:
                raise
            logger.warning(
                f"Identifier field '{field}' not declared on {type(record).__name__}; "
                f"resolving to None"
            )
            return None

    def resolve(self, field: str, record: Any) -> Any:
        """Resolve the value of `field` on `record` for use in a filter."""
        return coerce_identifier(self.read(field, record))
