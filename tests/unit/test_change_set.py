"""
Tests for change-set construction from records.

A change set holds every declared, non-None field of a record in
declaration order; zero values are kept.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

import pytest
from pydantic import BaseModel

from recordrepo import FieldAccessError
from recordrepo.repositories import ChangeSetBuilder, register_fields, unregister_fields


@dataclass
class Address:
    street: str
    city: Optional[str] = None


@dataclass
class Customer:
    id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    active: Optional[bool] = None
    tags: List[str] = field(default_factory=list)
    address: Optional[Address] = None


class Product(BaseModel):
    sku: str
    title: Optional[str] = None
    price: float = 0.0
    stock: Optional[int] = None


CUSTOMER_ID = UUID("550e8400-e29b-41d4-a716-446655440000")


class TestChangeSetBuilder:
    """Tests for ChangeSetBuilder.build."""

    def test_includes_only_non_none_fields(self):
        """None fields should be absent from the change set."""
        record = Customer(id=CUSTOMER_ID, name="Anna", email=None)

        change_set = ChangeSetBuilder().build(record)

        assert "email" not in change_set
        assert "age" not in change_set
        assert change_set["name"] == "Anna"
        assert change_set["id"] == CUSTOMER_ID

    def test_entry_count_equals_non_none_field_count(self):
        """N non-None fields should yield exactly N unique entries."""
        record = Customer(id=CUSTOMER_ID, name="Anna", age=31, tags=["vip"])

        change_set = ChangeSetBuilder().build(record)

        # id, name, age, tags
        assert len(change_set) == 4
        assert len(set(change_set)) == len(change_set)

    def test_zero_values_are_included(self):
        """0, False, "" and [] are values, not absence."""
        record = Customer(id=CUSTOMER_ID, name="", age=0, active=False, tags=[])

        change_set = ChangeSetBuilder().build(record)

        assert change_set["name"] == ""
        assert change_set["age"] == 0
        assert change_set["active"] is False
        assert change_set["tags"] == []

    def test_follows_declared_field_order(self):
        """Keys should come out in declaration order, not assignment order."""
        record = Customer(id=CUSTOMER_ID)
        record.active = True
        record.name = "Anna"
        record.age = 40

        change_set = ChangeSetBuilder().build(record)

        assert list(change_set) == ["id", "name", "age", "active", "tags"]

    def test_nested_dataclass_converted_to_document(self):
        """Nested records should become plain dicts."""
        record = Customer(id=CUSTOMER_ID, address=Address(street="1 Main St"))

        change_set = ChangeSetBuilder().build(record)

        assert change_set["address"] == {"street": "1 Main St", "city": None}

    def test_exclude_skips_named_fields(self):
        """Excluded fields never appear, even when set."""
        record = Customer(id=CUSTOMER_ID, name="Anna")

        change_set = ChangeSetBuilder(exclude=["id"]).build(record)

        assert change_set == {"name": "Anna", "tags": []}

    def test_pydantic_model(self):
        """Pydantic models enumerate model_fields in order."""
        record = Product(sku="A-1", price=0.0)

        change_set = ChangeSetBuilder().build(record)

        assert change_set == {"sku": "A-1", "price": 0.0}

    def test_mapping_record_uses_key_order(self):
        """Dict records use key insertion order and drop None values."""
        record = {"b": 2, "a": None, "c": "x"}

        change_set = ChangeSetBuilder().build(record)

        assert list(change_set) == ["b", "c"]

    def test_does_not_mutate_record(self):
        """Building a change set is read-only."""
        record = Customer(id=CUSTOMER_ID, name="Anna", tags=["a"])

        ChangeSetBuilder().build(record)

        assert record == Customer(id=CUSTOMER_ID, name="Anna", tags=["a"])

    def test_unreadable_field_fails_fast(self):
        """A registered field whose accessor raises should not be skipped."""

        class Broken:
            def __init__(self):
                self.ok = 1

            @property
            def bad(self):
                raise RuntimeError("boom")

        register_fields(Broken, ["ok", "bad"])
        try:
            with pytest.raises(FieldAccessError, match="bad"):
                ChangeSetBuilder().build(Broken())
        finally:
            unregister_fields(Broken)

    def test_to_update_wraps_in_set(self):
        """to_update should produce a $set update document."""
        assert ChangeSetBuilder.to_update({"name": "Anna"}) == {"$set": {"name": "Anna"}}
