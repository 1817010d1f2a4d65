"""
Repository Interface Definitions

Defines the abstract interface for record repository operations and the
result values they return. Implementations can be swapped (e.g. for tests)
without changing consumer code.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, Sequence, Tuple, TypeVar

from .predicates import FilterLike

R = TypeVar("R")


@dataclass
class WriteResult:
    """
    Result of a write operation.

    Attributes:
        matched_count: Number of documents that matched the filter
        modified_count: Number of documents actually modified
        deleted_count: Number of documents removed
        upserted_id: ID of upserted document (if any)
        inserted_ids: IDs of inserted documents, in input order
    """
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0
    upserted_id: Optional[str] = None
    inserted_ids: List[str] = field(default_factory=list)


@dataclass
class PagedResult(Generic[R]):
    """
    A window of records plus the size of the full matching set.

    Invariants: len(items) <= page_size, page >= 1, page_size >= 1,
    total_count >= 0 and counts every match regardless of the window.
    """
    items: List[R]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Number of pages needed to cover total_count."""
        return -(-self.total_count // self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


class RecordRepositoryInterface(ABC, Generic[R]):
    """
    Abstract interface for record collection operations.

    Implementations:
    - MongoRecordRepository: pymongo-backed

    All methods follow fail-fast semantics: store errors propagate to the
    caller unchanged. Lookups return None when nothing matches.
    """

    @abstractmethod
    def list_page(
        self,
        page: int = 1,
        page_size: int = 10,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
    ) -> PagedResult[R]:
        """
        List one page of all records.

        Args:
            page: 1-based page number
            page_size: Records per page
            sort: Sort order as list of (field, direction) tuples

        Returns:
            PagedResult with the page and the unfiltered total count

        Raises:
            InvalidPageError: If page or page_size is below 1
        """
        pass

    @abstractmethod
    def find_by_field(self, field: str, value: Any) -> Optional[R]:
        """
        Find the first record whose field equals value.

        Args:
            field: Field name to match
            value: Identifier value (canonical UUID strings match UUIDs)

        Returns:
            Record if found, None otherwise
        """
        pass

    @abstractmethod
    def find_by_object_id(
        self,
        object_id: str,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Optional[R]:
        """
        Find a record by its store-native _id.

        Args:
            object_id: ObjectId as 24-char hex string (or ObjectId)
            cancel_event: Set it to cancel the lookup
            timeout: Deadline in seconds for the round trip

        Returns:
            Record if found, None otherwise

        Raises:
            OperationCancelledError: If cancel_event is set before completion
        """
        pass

    @abstractmethod
    def search(self, field: str, text: str, page: int = 1, page_size: int = 10) -> PagedResult[R]:
        """
        Case-insensitive prefix search on a text field.

        Args:
            field: Field to search
            text: Literal prefix (regex metacharacters are escaped)
            page: 1-based page number
            page_size: Records per page

        Returns:
            PagedResult with the page and the total number of matches
        """
        pass

    @abstractmethod
    def insert(self, record: R) -> WriteResult:
        """Insert a single record."""
        pass

    @abstractmethod
    def insert_many(self, records: Sequence[R]) -> WriteResult:
        """Insert several records in one batch."""
        pass

    @abstractmethod
    def insert_into(self, record: R, collection_name: str) -> WriteResult:
        """Insert a single record into another collection."""
        pass

    @abstractmethod
    def replace_or_insert(self, identifier_field: str, record: R) -> WriteResult:
        """
        Replace the record matching the identifier, or insert it.

        Args:
            identifier_field: Name of the record's identifier field
            record: The full replacement

        Returns:
            WriteResult (upserted_id set when a new document was created)
        """
        pass

    @abstractmethod
    def partial_update(
        self,
        identifier_field: str,
        record: R,
        collection_name: Optional[str] = None,
    ) -> WriteResult:
        """
        Set every non-None field of record on the matching document.

        Args:
            identifier_field: Name of the record's identifier field
            record: Record carrying the new values
            collection_name: Optional collection override

        Returns:
            WriteResult with match/modify counts
        """
        pass

    @abstractmethod
    def set_field(self, predicate: FilterLike, field: str, value: Any) -> WriteResult:
        """Set one field on the first record matching predicate."""
        pass

    @abstractmethod
    def delete(
        self,
        field: str,
        value: Any,
        collection_name: Optional[str] = None,
    ) -> WriteResult:
        """Delete the first record whose field equals value."""
        pass

    @abstractmethod
    def delete_by_text(self, field: str, text: str) -> WriteResult:
        """Delete the first record whose field equals text exactly."""
        pass

    @abstractmethod
    def filter(self, predicate: FilterLike) -> List[R]:
        """Return every record matching predicate (unbounded)."""
        pass

    @abstractmethod
    def count(self, predicate: FilterLike = None) -> int:
        """Count records matching predicate (all records if None)."""
        pass
