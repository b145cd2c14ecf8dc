"""Typed query specifications.

Services describe *what* they want with small immutable predicate objects;
only the repositories turn them into store queries, so no store syntax leaks
into the aggregation or domain services.

    spec = all_of(Eq("status", "paid"), text_search(["team_name"], "owl"))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Union


@dataclass(frozen=True, slots=True)
class Eq:
    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class Contains:
    """Case-insensitive substring match."""

    field: str
    value: str


@dataclass(frozen=True, slots=True)
class Gte:
    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class Lt:
    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class AllOf:
    predicates: tuple["Predicate", ...] = ()


@dataclass(frozen=True, slots=True)
class AnyOf:
    predicates: tuple["Predicate", ...] = ()


Predicate = Union[Eq, Contains, Gte, Lt, AllOf, AnyOf]

MATCH_ALL = AllOf()


@dataclass(frozen=True, slots=True)
class SortKey:
    field: str
    descending: bool = False


def all_of(*predicates: Predicate | None) -> AllOf:
    """AND the given predicates, skipping ``None`` placeholders."""
    return AllOf(tuple(p for p in predicates if p is not None))


def any_of(*predicates: Predicate | None) -> AnyOf:
    """OR the given predicates, skipping ``None`` placeholders."""
    return AnyOf(tuple(p for p in predicates if p is not None))


def text_search(fields: Iterable[str], term: str | None) -> AnyOf | None:
    """Substring search of ``term`` across ``fields``; ``None`` for blank terms."""
    if term is None or not term.strip():
        return None
    needle = term.strip()
    return AnyOf(tuple(Contains(field, needle) for field in fields))


__all__ = [
    "AllOf",
    "AnyOf",
    "Contains",
    "Eq",
    "Gte",
    "Lt",
    "MATCH_ALL",
    "Predicate",
    "SortKey",
    "all_of",
    "any_of",
    "text_search",
]
