"""
Change sets for partial updates.

A change set is an ordered dict of field name -> value holding every
declared field of a record whose value is not None. Zero values (0, False,
"", []) are kept: only None means "absent".
"""

from typing import Any, Dict, Iterable

from .documents import to_value
from .fields import describe

ChangeSet = Dict[str, Any]


class ChangeSetBuilder:
    """
    Builds change sets from record instances.

    Fields are enumerated in declared order from the field descriptor
    table. A field whose accessor fails raises FieldAccessError.
    """

    def __init__(self, exclude: Iterable[str] = ()):
        """
        Args:
            exclude: Field names never included in a change set
        """
        self._exclude = frozenset(exclude)

    def build(self, record: Any) -> ChangeSet:
        """
        Build the change set for a record.

        Args:
            record: Record instance

        Returns:
            Ordered mapping of field name to BSON-ready value

        Raises:
            FieldAccessError: If a declared field cannot be read
        """
        change_set: ChangeSet = {}
        for descriptor in describe(record):
            if descriptor.name in self._exclude:
                continue
            value = descriptor.read(record)
            if value is not None:
                change_set[descriptor.name] = to_value(value)
        return change_set

    @staticmethod
    def to_update(change_set: ChangeSet) -> Dict[str, ChangeSet]:
        """Wrap a change set in a MongoDB $set update document."""
        return {"$set": dict(change_set)}
