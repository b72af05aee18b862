"""
Game Catalog API — Filter Descriptors
=======================================

What:  The predicate vocabulary the query builder emits and the repositories
       execute.
How:   A filter descriptor is a plain mapping of dotted field path
       (``"price.amount"``) to one predicate object. All entries are
       conjoined. Each predicate evaluates itself against a stored document
       (memory backend); SqlGameRepository compiles the same objects to
       JSONB expressions.

Predicates:
    AnyOf(values)       field (or any element of a list field) is in values
    Equals(value)       field equals value, or a list field holds it
    Contains(text)      case-insensitive literal substring of a string field
    Range(gte, lte)     numeric field within inclusive bounds
    NonEmptyList()      field exists, is a list, and has at least one element

A document that lacks the field never satisfies a predicate.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

# Returned by resolve_path() when any segment of the path is absent
MISSING = object()


def resolve_path(document: Mapping[str, Any], path: str) -> Any:
    """Walk a dotted path through nested mappings."""
    current: Any = document
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class AnyOf:
    values: Tuple[str, ...]

    def matches(self, value: Any) -> bool:
        if value is MISSING or value is None:
            return False
        if isinstance(value, list):
            return any(item in self.values for item in value)
        return value in self.values


@dataclass(frozen=True)
class Equals:
    value: Any

    def matches(self, value: Any) -> bool:
        if value is MISSING:
            return False
        if isinstance(value, list):
            return self.value in value
        return value == self.value


@dataclass(frozen=True)
class Contains:
    text: str

    def matches(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        return self.text.casefold() in value.casefold()


@dataclass(frozen=True)
class Range:
    gte: Optional[float] = None
    lte: Optional[float] = None

    def matches(self, value: Any) -> bool:
        if not _is_number(value):
            return False
        if self.gte is not None and value < self.gte:
            return False
        if self.lte is not None and value > self.lte:
            return False
        return True


@dataclass(frozen=True)
class NonEmptyList:
    def matches(self, value: Any) -> bool:
        return isinstance(value, list) and len(value) > 0


Predicate = Union[AnyOf, Equals, Contains, Range, NonEmptyList]
FilterSpec = Dict[str, Predicate]


@dataclass(frozen=True)
class Projection:
    """Top-level fields to keep in a returned document."""

    fields: Tuple[str, ...]
    include_id: bool = True

    def apply(self, document: Mapping[str, Any]) -> Dict[str, Any]:
        projected = {key: document[key] for key in self.fields if key in document}
        if self.include_id and "_id" in document:
            projected = {"_id": document["_id"], **projected}
        return projected


@dataclass(frozen=True)
class SortSpec:
    path: str
    descending: bool = False


def any_of(values: Iterable[str]) -> AnyOf:
    return AnyOf(tuple(values))


def matches_filter(document: Mapping[str, Any], spec: Mapping[str, Predicate]) -> bool:
    """True when the document satisfies every predicate in the descriptor."""
    return all(
        predicate.matches(resolve_path(document, path))
        for path, predicate in spec.items()
    )
