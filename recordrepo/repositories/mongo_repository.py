"""
MongoDB Record Repository

Generic repository for one record type over one collection. Every method
is a single round trip to the store (insert_many is one batch); the only
local logic is identifier resolution and change-set construction.
"""

import threading
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

import pymongo
from bson import ObjectId
from pymongo.collection import Collection

from ..common.error_handling import InvalidPageError, OperationCancelledError, store_operation
from ..common.logger import get_logger
from .base import PagedResult, RecordRepositoryInterface, WriteResult
from .change_set import ChangeSetBuilder
from .documents import from_document, to_document, to_value
from .identifiers import IdentifierResolver, match_identifier
from .predicates import ALL, FilterLike, field as field_of, to_query

R = TypeVar("R")


class MongoRecordRepository(RecordRepositoryInterface[R], Generic[R]):
    """
    pymongo-backed repository for records of one type.

    The database handle can be a recordrepo DatabaseClient or a pymongo
    Database; both provide get_collection(name).

    Identifiers:
    - Records are stored with identifiers exactly as they declare them
    - Lookups, deletes and targeted writes match a UUID identifier in both
      its native and its string form
    - strict_fields=False makes a missing identifier field resolve to None
      instead of raising FieldNotFoundError; writes targeting a None
      identifier are skipped and logged

    Error Handling:
    - Fail-fast: pymongo errors propagate to the caller unchanged
    - Nothing is retried
    """

    def __init__(
        self,
        record_type: Type[R],
        database: Any,
        collection_name: Optional[str] = None,
        strict_fields: bool = True,
    ):
        """
        Args:
            record_type: Class of the stored records (dataclass, pydantic
                model, registered class, or dict)
            database: DatabaseClient or pymongo Database
            collection_name: Collection name (default: record_type.__name__)
            strict_fields: Fail on undeclared identifier fields
        """
        self.record_type = record_type
        self.collection_name = collection_name or record_type.__name__
        self._database = database
        self._resolver = IdentifierResolver(strict=strict_fields)
        self._change_sets = ChangeSetBuilder()

        database_name = getattr(database, "name", None)
        self.log = get_logger(
            __name__,
            collection=self.collection_name,
            database=database_name if isinstance(database_name, str) else None,
        )

    def collection(self, name: Optional[str] = None) -> Collection:
        """
        Get the underlying pymongo collection.

        Args:
            name: Collection name (default: this repository's collection)
        """
        return self._database.get_collection(name or self.collection_name)

    def _resolve_target(self, identifier_field: str, record: R, operation: str) -> Optional[Dict[str, Any]]:
        # {field: None} would match every document lacking the field
        identifier = self._resolver.read(identifier_field, record)
        if identifier is None:
            self.log.for_operation(operation).warning(
                f"Identifier '{identifier_field}' resolved to None, skipping write"
            )
            return None
        return match_identifier(identifier_field, identifier)

    def _to_record(self, document: Optional[Dict[str, Any]]) -> Optional[R]:
        return from_document(document, self.record_type)

    def _page(
        self,
        query: Dict[str, Any],
        page: int,
        page_size: int,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
    ) -> PagedResult[R]:
        if page < 1 or page_size < 1:
            raise InvalidPageError(page, page_size)

        collection = self.collection()
        cursor = collection.find(query)
        if sort:
            cursor = cursor.sort(list(sort))
        cursor = cursor.skip((page - 1) * page_size).limit(page_size)

        items = [self._to_record(doc) for doc in cursor]
        total_count = collection.count_documents(query)

        return PagedResult(
            items=items,
            total_count=total_count,
            page=page,
            page_size=page_size,
        )

    @store_operation("list_page")
    def list_page(
        self,
        page: int = 1,
        page_size: int = 10,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
    ) -> PagedResult[R]:
        """List one page of all records, with the unfiltered total count."""
        return self._page(ALL.to_query(), page, page_size, sort)

    @store_operation("find_by_field")
    def find_by_field(self, field: str, value: Any) -> Optional[R]:
        """Find the first record whose field equals value."""
        document = self.collection().find_one(match_identifier(field, value))
        return self._to_record(document)

    @store_operation("find_by_object_id")
    def find_by_object_id(
        self,
        object_id: str,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Optional[R]:
        """
        Find a record by its store-native _id.

        The cancel event is checked before the request is sent and again
        before the result is decoded. timeout bounds the round trip via
        pymongo.timeout(); an expired deadline raises pymongo's own error.

        Raises:
            OperationCancelledError: If cancel_event is set
            bson.errors.InvalidId: If object_id is not a valid ObjectId
        """
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelledError("find_by_object_id")

        query = {"_id": ObjectId(object_id)}
        with pymongo.timeout(timeout):
            document = self.collection().find_one(query)

        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelledError("find_by_object_id")
        return self._to_record(document)

    @store_operation("search")
    def search(self, field: str, text: str, page: int = 1, page_size: int = 10) -> PagedResult[R]:
        """
        Case-insensitive prefix search.

        "ann" matches "Anna" and "annabelle" but not "Hannah".
        """
        query = field_of(field).starts_with(text, ignore_case=True).to_query()
        return self._page(query, page, page_size)

    @store_operation("insert")
    def insert(self, record: R) -> WriteResult:
        """Insert a single record."""
        result = self.collection().insert_one(to_document(record))
        return WriteResult(inserted_ids=[str(result.inserted_id)])

    @store_operation("insert_many")
    def insert_many(self, records: Sequence[R]) -> WriteResult:
        """Insert several records in one batch. An empty batch is a no-op."""
        if not records:
            return WriteResult()
        documents = [to_document(record) for record in records]
        result = self.collection().insert_many(documents)
        return WriteResult(inserted_ids=[str(i) for i in result.inserted_ids])

    @store_operation("insert_into")
    def insert_into(self, record: R, collection_name: str) -> WriteResult:
        """Insert a single record into another collection."""
        result = self.collection(collection_name).insert_one(to_document(record))
        return WriteResult(inserted_ids=[str(result.inserted_id)])

    @store_operation("replace_or_insert")
    def replace_or_insert(self, identifier_field: str, record: R) -> WriteResult:
        """Replace the record matching the identifier, or insert it."""
        target = self._resolve_target(identifier_field, record, "replace_or_insert")
        if target is None:
            return WriteResult()
        result = self.collection().replace_one(
            target,
            to_document(record),
            upsert=True,
        )
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=str(result.upserted_id) if result.upserted_id else None,
        )

    @store_operation("partial_update")
    def partial_update(
        self,
        identifier_field: str,
        record: R,
        collection_name: Optional[str] = None,
    ) -> WriteResult:
        """
        Set every non-None field of record on the matching document.

        The identifier keeps its declared form; it is only used to match.
        """
        target = self._resolve_target(identifier_field, record, "partial_update")
        if target is None:
            return WriteResult()
        change_set = self._change_sets.build(record)

        result = self.collection(collection_name).update_one(
            target,
            ChangeSetBuilder.to_update(change_set),
        )
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    @store_operation("set_field")
    def set_field(self, predicate: FilterLike, field: str, value: Any) -> WriteResult:
        """Set one field on the first record matching predicate."""
        result = self.collection().update_one(
            to_query(predicate),
            {"$set": {field: to_value(value)}},
        )
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    @store_operation("delete")
    def delete(
        self,
        field: str,
        value: Any,
        collection_name: Optional[str] = None,
    ) -> WriteResult:
        """Delete the first record whose field equals value."""
        result = self.collection(collection_name).delete_one(match_identifier(field, value))
        return WriteResult(deleted_count=result.deleted_count)

    @store_operation("delete_by_text")
    def delete_by_text(self, field: str, text: str) -> WriteResult:
        """Delete the first record whose field equals text exactly."""
        result = self.collection().delete_one({field: text})
        return WriteResult(deleted_count=result.deleted_count)

    @store_operation("filter")
    def filter(self, predicate: FilterLike) -> List[R]:
        """Return every record matching predicate."""
        return [self._to_record(doc) for doc in self.collection().find(to_query(predicate))]

    @store_operation("count")
    def count(self, predicate: FilterLike = None) -> int:
        """Count records matching predicate."""
        return self.collection().count_documents(to_query(predicate))
