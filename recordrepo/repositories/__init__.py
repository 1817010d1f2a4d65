"""
Repository Pattern for MongoDB Records

Generic, record-type-agnostic repositories over pymongo collections.

Public API:
- get_repository(): Factory returning a repository for a record type
- MongoRecordRepository: pymongo-backed implementation
- RecordRepositoryInterface: Abstract interface
- PagedResult / WriteResult: Result values
- ChangeSetBuilder: Partial-update documents from records
- IdentifierResolver: Identifier extraction with UUID coercion
- field / ALL: Predicate builder

Usage:
    from dataclasses import dataclass
    from uuid import UUID, uuid4
    from recordrepo.repositories import get_repository, field

    @dataclass
    class Customer:
        id: UUID
        name: str
        email: str = None

    repo = get_repository(Customer)
    repo.insert(Customer(id=uuid4(), name="Anna"))
    page = repo.list_page(page=1, page_size=20)
    repo.partial_update("id", Customer(id=some_id, name="Anna B."))
    repo.filter(field("name").starts_with("an"))
"""

from .base import PagedResult, RecordRepositoryInterface, WriteResult
from .change_set import ChangeSet, ChangeSetBuilder
from .config import (
    RepositoryConfig,
    get_database_client,
    get_repository,
    reset_repositories,
)
from .fields import FieldDescriptor, describe, register_fields, unregister_fields
from .identifiers import IdentifierResolver, coerce_identifier, match_identifier
from .mongo_repository import MongoRecordRepository
from .predicates import ALL, Predicate, field

__all__ = [
    # Repositories
    "get_repository",
    "get_database_client",
    "reset_repositories",
    "MongoRecordRepository",
    "RecordRepositoryInterface",
    "RepositoryConfig",
    # Results
    "PagedResult",
    "WriteResult",
    # Change sets and identifiers
    "ChangeSet",
    "ChangeSetBuilder",
    "IdentifierResolver",
    "coerce_identifier",
    "match_identifier",
    "FieldDescriptor",
    "describe",
    "register_fields",
    "unregister_fields",
    # Predicates
    "ALL",
    "Predicate",
    "field",
]
