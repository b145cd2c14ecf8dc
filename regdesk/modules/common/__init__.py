"""Shared contracts for the domain modules."""

from .pagination import Page, page_count
from .query import (
    MATCH_ALL,
    AllOf,
    AnyOf,
    Contains,
    Eq,
    Gte,
    Lt,
    Predicate,
    SortKey,
    all_of,
    any_of,
    text_search,
)
from .repository import AggregationGroup, Repository

__all__ = [
    "AggregationGroup",
    "AllOf",
    "AnyOf",
    "Contains",
    "Eq",
    "Gte",
    "Lt",
    "MATCH_ALL",
    "Page",
    "Predicate",
    "Repository",
    "SortKey",
    "all_of",
    "any_of",
    "page_count",
    "text_search",
]
