"""
MongoDB connection management for recordrepo.

Owns the MongoClient, selects the logical database and hands out
collections. UUIDs are encoded with the standard (subtype 4) binary
representation for every collection obtained through this client; the
codec is bound once, when the MongoClient is built.
"""

import logging
from typing import Any, Dict, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class DatabaseClient:
    """
    MongoDB client for one logical database.

    Connection Management:
    - The MongoClient is created lazily on first use and reused afterwards
    - PyMongo pools connections internally and is thread-safe

    Error Handling:
    - Fail-fast: driver errors propagate to the caller unchanged
    """

    def __init__(self, mongodb_uri: str, database: str, **client_options: Any):
        """
        Initialize the client with connection parameters.

        Args:
            mongodb_uri: MongoDB connection string
            database: Logical database name
            **client_options: Extra keyword arguments for MongoClient
        """
        if not mongodb_uri:
            raise ValueError("MongoDB connection string is required")
        if not database:
            raise ValueError("MongoDB database name is required")

        self._mongodb_uri = mongodb_uri
        self._database_name = database
        self._client_options = client_options
        self._client: Optional[MongoClient] = None
        self._db: Optional[Database] = None

    @property
    def name(self) -> str:
        """Logical database name (same attribute as pymongo's Database)."""
        return self._database_name

    def connect(self) -> Database:
        """
        Create the MongoClient if needed and return the database handle.

        Returns:
            MongoDB database instance
        """
        if self._db is None:
            self._client = MongoClient(
                self._mongodb_uri,
                uuidRepresentation="standard",
                **self._client_options,
            )
            self._db = self._client[self._database_name]
            logger.info(
                f"Connected to MongoDB: {sanitize_mongodb_url(self._mongodb_uri)} "
                f"(database: {self._database_name})"
            )
        return self._db

    @property
    def db(self) -> Database:
        """Get the database instance, connecting on first access."""
        return self.connect()

    def get_collection(self, name: str) -> Collection:
        """Get a collection by name."""
        return self.db[name]

    def check_connection(self) -> bool:
        """
        Check if the MongoDB connection is healthy.

        Returns:
            True if the server answered a ping, False otherwise
        """
        try:
            self.db.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    def info(self) -> Dict[str, str]:
        """Connection information and status, safe for logging."""
        return {
            "status": "connected" if self._client is not None else "disconnected",
            "url": sanitize_mongodb_url(self._mongodb_uri),
            "database": self._database_name,
        }

    def close(self) -> None:
        """Close the MongoDB connection."""
        if self._client is not None:
            self._client.close()
            logger.info("Disconnected from MongoDB")
        self._client = None
        self._db = None


def sanitize_mongodb_url(url: str) -> str:
    """
    Hide password in MongoDB URL for safe logging.
    """
    if "@" not in url or "://" not in url:
        return url

    protocol, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    if ":" in credentials:
        username = credentials.split(":", 1)[0]
        return f"{protocol}://{username}:***@{host}"
    return url
