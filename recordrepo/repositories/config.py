"""
Repository Configuration and Factory

Loads connection settings from a named section of environment variables
and hands out repositories that share one DatabaseClient per process.
"""

import os
import logging
import threading
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from ..common.config import Config
from ..common.database import DatabaseClient
from .mongo_repository import MongoRecordRepository

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass
class RepositoryConfig:
    """
    Connection settings for repositories.

    Loaded from environment variables prefixed with a section name.
    """
    connection_string: str
    database_name: str
    strict_fields: bool = True

    @classmethod
    def from_env(cls, section: Optional[str] = None) -> "RepositoryConfig":
        """
        Load configuration from environment variables.

        Environment variables (SECTION defaults to Config.DEFAULT_CONFIG_SECTION):
        - <SECTION>_URI (required): MongoDB connection string
        - <SECTION>_DATABASE (required): Logical database name
        - <SECTION>_STRICT_FIELDS: Fail on undeclared identifier fields (true/false)

        Returns:
            RepositoryConfig instance

        Raises:
            ValueError: If a required variable is not set
        """
        section = (section or Config.DEFAULT_CONFIG_SECTION).upper()

        uri_var = f"{section}_URI"
        connection_string = os.getenv(uri_var)
        if not connection_string:
            raise ValueError(f"{uri_var} environment variable is required")

        database_var = f"{section}_DATABASE"
        database_name = os.getenv(database_var)
        if not database_name:
            raise ValueError(f"{database_var} environment variable is required")

        strict_str = os.getenv(f"{section}_STRICT_FIELDS", "true").lower()
        if strict_str not in ("true", "false"):
            logger.warning(f"Invalid {section}_STRICT_FIELDS '{strict_str}', defaulting to true")
            strict_str = "true"

        return cls(
            connection_string=connection_string,
            database_name=database_name,
            strict_fields=strict_str == "true",
        )


# Shared client and the config it was built from
_client_instance: Optional[DatabaseClient] = None
_client_config: Optional[RepositoryConfig] = None
_client_lock = threading.Lock()


def get_database_client(config: Optional[RepositoryConfig] = None) -> DatabaseClient:
    """
    Get the process-wide DatabaseClient.

    Created on first call from `config` (or the environment) and reused
    afterwards. A different `config` passed later is ignored with a
    warning; call reset_repositories() to switch configuration.

    Raises:
        ValueError: If MongoDB settings are not configured
    """
    global _client_instance, _client_config

    with _client_lock:
        if _client_instance is None:
            _client_config = config or RepositoryConfig.from_env()
            _client_instance = DatabaseClient(
                _client_config.connection_string,
                _client_config.database_name,
            )
            logger.info(f"Initialized database client for '{_client_config.database_name}'")
        elif config is not None and config != _client_config:
            logger.warning(
                f"Ignoring config for '{config.database_name}': shared client already built for "
                f"'{_client_config.database_name}' (call reset_repositories() to switch)"
            )
        return _client_instance


def get_repository(
    record_type: Type[R],
    collection_name: Optional[str] = None,
    config: Optional[RepositoryConfig] = None,
) -> MongoRecordRepository[R]:
    """
    Get a repository for a record type.

    Repositories are cheap; they share the pooled DatabaseClient.

    Args:
        record_type: Class of the stored records
        collection_name: Collection override (default: record_type.__name__)
        config: Settings; loaded from the environment if omitted

    Returns:
        MongoRecordRepository bound to the shared client

    Raises:
        ValueError: If MongoDB settings are not configured
    """
    client = get_database_client(config)
    settings = _client_config
    return MongoRecordRepository(
        record_type,
        client,
        collection_name=collection_name,
        strict_fields=settings.strict_fields,
    )


def reset_repositories() -> None:
    """
    Close and drop the shared client.

    Used for testing or when configuration changes.
    """
    global _client_instance, _client_config

    with _client_lock:
        if _client_instance is not None:
            _client_instance.close()
        _client_instance = None
        _client_config = None
    logger.info("Repository client reset")
