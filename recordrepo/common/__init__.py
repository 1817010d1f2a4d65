"""
Shared infrastructure: configuration, logging, errors and connections.
"""

from .config import Config
from .database import DatabaseClient, sanitize_mongodb_url
from .error_handling import (
    FieldAccessError,
    FieldNotFoundError,
    InvalidPageError,
    OperationCancelledError,
    RecordRepositoryError,
    StoreConnectivityError,
    store_operation,
)
from .logger import RepositoryLogger, get_logger, setup_logging

__all__ = [
    "Config",
    "DatabaseClient",
    "sanitize_mongodb_url",
    "FieldAccessError",
    "FieldNotFoundError",
    "InvalidPageError",
    "OperationCancelledError",
    "RecordRepositoryError",
    "StoreConnectivityError",
    "store_operation",
    "RepositoryLogger",
    "get_logger",
    "setup_logging",
]
