"""
Error types and error logging for recordrepo.

The library does not translate or retry store failures: anything raised by
pymongo reaches the caller unchanged. The errors defined here cover the
conditions the library itself detects (missing or unreadable record fields,
bad pagination, cancellation).
"""

import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from pymongo.errors import PyMongoError

from .logger import RepositoryLogger

T = TypeVar("T")

# Store failures (connection, timeout, write errors) surface as pymongo's own
# exception hierarchy. Exported under this name for callers that want to
# catch "anything the store raised".
StoreConnectivityError = PyMongoError


class RecordRepositoryError(Exception):
    """Base class for errors raised by recordrepo itself."""


class FieldNotFoundError(RecordRepositoryError):
    """Raised when a named field is not declared on a record's type."""

    def __init__(self, record_type: type, field_name: str):
        self.record_type = record_type
        self.field_name = field_name
        super().__init__(
            f"Field '{field_name}' is not declared on {record_type.__name__}"
        )


class FieldAccessError(RecordRepositoryError):
    """Raised when a declared field exists but its value cannot be read."""

    def __init__(self, record_type: type, field_name: str, cause: Exception):
        self.record_type = record_type
        self.field_name = field_name
        self.cause = cause
        super().__init__(
            f"Cannot read field '{field_name}' of {record_type.__name__}: "
            f"{type(cause).__name__}: {cause}"
        )


class InvalidPageError(RecordRepositoryError, ValueError):
    """Raised when page or page_size is below 1."""

    def __init__(self, page: int, page_size: int):
        self.page = page
        self.page_size = page_size
        super().__init__(
            f"page and page_size must be >= 1 (got page={page}, page_size={page_size})"
        )


class OperationCancelledError(RecordRepositoryError):
    """Raised when a cancellable operation observes its cancel event."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Operation '{operation}' was cancelled")


def store_operation(operation_name: str, log_success: bool = True):
    """
    Decorator for repository methods that talk to the store.

    Logs successful completion at DEBUG and failures at ERROR, then
    re-raises. Never returns a fallback value. Messages go through the
    instance's RepositoryLogger (self.log), tagged with the operation name.

    Args:
        operation_name: Human-readable operation name (e.g., "list_page")
        log_success: If True, logs successful completion at DEBUG level

    Usage:
        @store_operation("partial_update")
        def partial_update(self, identifier_field, record, collection_name=None):
            ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(self, *args: Any, **kwargs: Any) -> T:
            log = getattr(self, "log", None)
            if not isinstance(log, RepositoryLogger):
                log = RepositoryLogger(logging.getLogger(func.__module__))
            log = log.for_operation(operation_name)
            try:
                result = func(self, *args, **kwargs)
            except Exception as e:
                log.error(f"✗ Failed: {type(e).__name__}: {e}")
                raise
            if log_success:
                log.debug("✓ Completed")
            return result

        return wrapper

    return decorator
