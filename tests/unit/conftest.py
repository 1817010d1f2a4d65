"""
Global fixtures for all unit tests.

This conftest provides:
- Autouse isolation from real MongoDB connections and real credentials
- FakeDatabase / FakeCollection: an in-memory stand-in for the handful of
  pymongo collection methods the repositories call, for end-to-end tests
"""

import copy
import re
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from unittest.mock import MagicMock, patch

from recordrepo.repositories import reset_repositories


@pytest.fixture(autouse=True)
def mock_mongo_client():
    """
    Prevent MongoDB connection attempts in all unit tests.

    MongoClient("") defaults to localhost:27017, which would hang each test
    on server selection.
    """
    with patch("recordrepo.common.database.MongoClient") as mock_client:
        mock_instance = MagicMock()
        mock_db = MagicMock()
        mock_instance.__getitem__ = MagicMock(return_value=mock_db)
        mock_client.return_value = mock_instance
        yield mock_client


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep real connection settings out of the tests."""
    for name in (
        "MONGODB_URI",
        "MONGODB_DATABASE",
        "MONGODB_STRICT_FIELDS",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    reset_repositories()


# ===== In-memory store =====


_MISSING = object()


def _lookup(document: Dict[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _match_operators(value: Any, conditions: Dict[str, Any]) -> bool:
    for operator, operand in conditions.items():
        present = value is not _MISSING
        if operator == "$eq":
            ok = present and value == operand or (operand is None and not present)
        elif operator == "$ne":
            ok = not (present and value == operand)
        elif operator == "$gt":
            ok = present and value > operand
        elif operator == "$gte":
            ok = present and value >= operand
        elif operator == "$lt":
            ok = present and value < operand
        elif operator == "$lte":
            ok = present and value <= operand
        elif operator == "$in":
            ok = present and value in operand
        elif operator == "$nin":
            ok = not (present and value in operand)
        elif operator == "$exists":
            ok = present == bool(operand)
        elif operator == "$regex":
            flags = re.IGNORECASE if "i" in conditions.get("$options", "") else 0
            ok = present and isinstance(value, str) and re.search(operand, value, flags) is not None
        elif operator == "$options":
            ok = True
        elif operator == "$not":
            ok = not _match_operators(value, operand)
        else:
            raise NotImplementedError(f"FakeCollection does not support {operator}")
        if not ok:
            return False
    return True


def matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Evaluate a MongoDB query document against a stored document."""
    for key, condition in query.items():
        if key == "$and":
            if not all(matches(document, clause) for clause in condition):
                return False
        elif key == "$or":
            if not any(matches(document, clause) for clause in condition):
                return False
        elif key == "$nor":
            if any(matches(document, clause) for clause in condition):
                return False
        else:
            value = _lookup(document, key)
            if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
                if not _match_operators(value, condition):
                    return False
            elif not _match_operators(value, {"$eq": condition}):
                return False
    return True


class FakeCursor:
    """Fake pymongo cursor supporting sort/skip/limit chaining."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents
        self._skip = 0
        self._limit = 0

    def sort(self, keys):
        for key, direction in reversed(list(keys)):
            self._documents.sort(key=lambda d: _lookup(d, key), reverse=direction < 0)
        return self

    def skip(self, count: int):
        self._skip = count
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def __iter__(self):
        window = self._documents[self._skip:]
        if self._limit:
            window = window[:self._limit]
        return iter(copy.deepcopy(window))


class FakeCollection:
    """Fake pymongo collection storing documents in insertion order."""

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []

    def _first(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return next((d for d in self.documents if matches(d, query)), None)

    def insert_one(self, document: Dict[str, Any]):
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    def insert_many(self, documents: List[Dict[str, Any]]):
        if not documents:
            raise TypeError("documents must be a non-empty list")
        return SimpleNamespace(
            inserted_ids=[self.insert_one(d).inserted_id for d in documents]
        )

    def find(self, query: Optional[Dict[str, Any]] = None, projection=None):
        query = query or {}
        return FakeCursor([d for d in self.documents if matches(d, query)])

    def find_one(self, query: Optional[Dict[str, Any]] = None):
        found = self._first(query or {})
        return copy.deepcopy(found) if found is not None else None

    def count_documents(self, query: Dict[str, Any]) -> int:
        return sum(1 for d in self.documents if matches(d, query))

    def replace_one(self, query, replacement, upsert: bool = False):
        found = self._first(query)
        if found is not None:
            new_document = dict(copy.deepcopy(replacement), _id=found["_id"])
            modified = int(new_document != found)
            self.documents[self.documents.index(found)] = new_document
            return SimpleNamespace(matched_count=1, modified_count=modified, upserted_id=None)
        if upsert:
            inserted = self.insert_one(copy.deepcopy(replacement))
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=inserted.inserted_id)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    def update_one(self, query, update, upsert: bool = False):
        if set(update) != {"$set"} or not update["$set"]:
            raise ValueError("FakeCollection only supports a non-empty $set")
        found = self._first(query)
        if found is None:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
        before = copy.deepcopy(found)
        for path, value in update["$set"].items():
            target = found
            *parents, leaf = path.split(".")
            for part in parents:
                target = target.setdefault(part, {})
            target[leaf] = copy.deepcopy(value)
        return SimpleNamespace(matched_count=1, modified_count=int(before != found), upserted_id=None)

    def delete_one(self, query):
        found = self._first(query)
        if found is None:
            return SimpleNamespace(deleted_count=0)
        self.documents.remove(found)
        return SimpleNamespace(deleted_count=1)


class FakeDatabase:
    """Fake pymongo database handing out FakeCollections by name."""

    def __init__(self, name: str = "testdb"):
        self.name = name
        self.collections: Dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def __getitem__(self, name: str) -> FakeCollection:
        return self.get_collection(name)


@pytest.fixture
def fake_db() -> FakeDatabase:
    """An empty in-memory database."""
    return FakeDatabase()
