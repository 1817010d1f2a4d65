"""
Predicate Builder

Small value objects describing a filter as {field path, operator, value},
combinable with & (AND) and | (OR), negated with ~, and translated into
MongoDB query documents with to_query().

Usage:
    from recordrepo.repositories.predicates import field

    active_adults = (field("status") == "active") & (field("age") >= 18)
    repo.filter(active_adults)
    # -> {"$and": [{"status": {"$eq": "active"}}, {"age": {"$gte": 18}}]}
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Tuple, Union

Query = Dict[str, Any]


class Predicate:
    """Base class for filter expressions."""

    def to_query(self) -> Query:
        raise NotImplementedError

    def __and__(self, other: "Predicate") -> "Predicate":
        return _combine("$and", self, other)

    def __or__(self, other: "Predicate") -> "Predicate":
        return _combine("$or", self, other)

    def __invert__(self) -> "Predicate":
        return Compound("$nor", (self,))


@dataclass(frozen=True)
class Comparison(Predicate):
    """A single {field, operator, value} condition."""
    field_path: str
    operator: str
    value: Any

    def to_query(self) -> Query:
        return {self.field_path: {self.operator: self.value}}

    def __invert__(self) -> "Comparison":
        if self.operator == "$not":
            (operator, value), = self.value.items()
            return Comparison(self.field_path, operator, value)
        return Comparison(self.field_path, "$not", {self.operator: self.value})


@dataclass(frozen=True)
class Compound(Predicate):
    """Clauses joined by $and, $or or $nor."""
    operator: str
    clauses: Tuple[Predicate, ...]

    def to_query(self) -> Query:
        return {self.operator: [clause.to_query() for clause in self.clauses]}

    def __invert__(self) -> Predicate:
        if self.operator == "$nor" and len(self.clauses) == 1:
            return self.clauses[0]
        return super().__invert__()


@dataclass(frozen=True)
class MatchAll(Predicate):
    """Matches every document."""

    def to_query(self) -> Query:
        return {}

    def __and__(self, other: Predicate) -> Predicate:
        return other

    def __or__(self, other: Predicate) -> Predicate:
        return self


ALL = MatchAll()


def _combine(operator: str, left: Predicate, right: Predicate) -> Predicate:
    if isinstance(right, MatchAll):
        return left if operator == "$and" else right
    clauses = []
    for side in (left, right):
        # Flatten (a & b) & c into one $and
        if isinstance(side, Compound) and side.operator == operator:
            clauses.extend(side.clauses)
        else:
            clauses.append(side)
    return Compound(operator, tuple(clauses))


class Field:
    """
    Entry point for building comparisons on a (dotted) field path.

    Comparison operators return Predicate objects instead of booleans.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, path: str):
        if not path:
            raise ValueError("Field path must be non-empty")
        self.path = path

    def __repr__(self) -> str:
        return f"Field({self.path!r})"

    def __eq__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.path, "$eq", value)

    def __ne__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.path, "$ne", value)

    def __lt__(self, value: Any) -> Comparison:
        return Comparison(self.path, "$lt", value)

    def __le__(self, value: Any) -> Comparison:
        return Comparison(self.path, "$lte", value)

    def __gt__(self, value: Any) -> Comparison:
        return Comparison(self.path, "$gt", value)

    def __ge__(self, value: Any) -> Comparison:
        return Comparison(self.path, "$gte", value)

    def is_in(self, values: Iterable[Any]) -> Comparison:
        return Comparison(self.path, "$in", list(values))

    def not_in(self, values: Iterable[Any]) -> Comparison:
        return Comparison(self.path, "$nin", list(values))

    def exists(self, flag: bool = True) -> Comparison:
        return Comparison(self.path, "$exists", flag)

    def matches(self, pattern: str, ignore_case: bool = False) -> Predicate:
        """Regular-expression match (pattern used verbatim)."""
        return Regex(self.path, pattern, "i" if ignore_case else "")

    def starts_with(self, text: str, ignore_case: bool = True) -> Predicate:
        """Prefix match on literal text (regex metacharacters escaped)."""
        return Regex(self.path, "^" + re.escape(text), "i" if ignore_case else "")


@dataclass(frozen=True)
class Regex(Predicate):
    """A $regex condition with options."""
    field_path: str
    pattern: str
    options: str = ""

    def to_query(self) -> Query:
        condition: Dict[str, str] = {"$regex": self.pattern}
        if self.options:
            condition["$options"] = self.options
        return {self.field_path: condition}


def field(path: str) -> Field:
    """Start a predicate on a field path."""
    return Field(path)


FilterLike = Union[Predicate, Mapping[str, Any], None]


def to_query(predicate: FilterLike) -> Query:
    """
    Normalise a filter argument into a MongoDB query document.

    Accepts a Predicate, a raw query mapping, or None (match all).
    """
    if predicate is None:
        return {}
    if isinstance(predicate, Predicate):
        return predicate.to_query()
    if isinstance(predicate, Mapping):
        return dict(predicate)
    raise TypeError(f"Unsupported filter type: {type(predicate).__name__}")
