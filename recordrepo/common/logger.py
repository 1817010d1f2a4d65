"""
Logging for recordrepo.

Repository log lines carry the store location they touch and, inside a
store operation, the operation name:

    [crm.Customer] [partial_update] ✗ Failed: ...
"""

import logging
import sys
from typing import Optional

from .config import Config

PACKAGE_LOGGER = "recordrepo"

_FORMATS = {
    "simple": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}',
}


class RepositoryLogger(logging.LoggerAdapter):
    """LoggerAdapter prefixing messages with [database.collection] [operation]."""

    def __init__(
        self,
        logger: logging.Logger,
        collection: Optional[str] = None,
        database: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(logger, {
            "collection": collection,
            "database": database,
            "operation": operation,
        })

    @property
    def prefix(self) -> str:
        collection = self.extra["collection"]
        database = self.extra["database"]
        operation = self.extra["operation"]

        parts = []
        if collection:
            parts.append(f"[{database}.{collection}]" if database else f"[{collection}]")
        if operation:
            parts.append(f"[{operation}]")
        return " ".join(parts)

    def for_operation(self, operation: str) -> "RepositoryLogger":
        """Same logger and location, tagged with a store operation name."""
        return RepositoryLogger(
            self.logger,
            collection=self.extra["collection"],
            database=self.extra["database"],
            operation=operation,
        )

    def process(self, msg, kwargs):
        prefix = self.prefix
        return (f"{prefix} {msg}" if prefix else msg), kwargs


def get_logger(
    name: str,
    collection: Optional[str] = None,
    database: Optional[str] = None,
) -> RepositoryLogger:
    """Get a RepositoryLogger over logging.getLogger(name)."""
    return RepositoryLogger(logging.getLogger(name), collection=collection, database=database)


def setup_logging(level: Optional[str] = None, format: Optional[str] = None) -> logging.Logger:
    """
    Attach a stdout handler to the recordrepo package logger.

    The library never calls this itself; applications opt in once at
    startup. Only the package logger is touched, not the root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Defaults to Config.LOG_LEVEL,
               or DEBUG when Config.DEBUG_MODE is set
        format: "simple" or "json". Defaults to Config.LOG_FORMAT

    Returns:
        The configured package logger
    """
    if level is None:
        level = "DEBUG" if Config.DEBUG_MODE else Config.LOG_LEVEL
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        _FORMATS.get(format or Config.LOG_FORMAT, _FORMATS["simple"]),
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(log_level)
    return package_logger
