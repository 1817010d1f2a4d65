"""
recordrepo - generic record repositories over MongoDB.
"""

from .version import __version__
from .common.error_handling import (
    FieldAccessError,
    FieldNotFoundError,
    InvalidPageError,
    OperationCancelledError,
    RecordRepositoryError,
    StoreConnectivityError,
)
from .repositories import (
    ALL,
    ChangeSetBuilder,
    IdentifierResolver,
    MongoRecordRepository,
    PagedResult,
    RepositoryConfig,
    WriteResult,
    field,
    get_repository,
    register_fields,
    reset_repositories,
)

__all__ = [
    "__version__",
    "FieldAccessError",
    "FieldNotFoundError",
    "InvalidPageError",
    "OperationCancelledError",
    "RecordRepositoryError",
    "StoreConnectivityError",
    "ALL",
    "ChangeSetBuilder",
    "IdentifierResolver",
    "MongoRecordRepository",
    "PagedResult",
    "RepositoryConfig",
    "WriteResult",
    "field",
    "get_repository",
    "register_fields",
    "reset_repositories",
]
