"""Compilation of typed query specifications into SQLAlchemy clauses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from regdesk.core.timeutils import to_storage
from regdesk.modules.common.query import (
    AllOf,
    AnyOf,
    Contains,
    Eq,
    Gte,
    Lt,
    Predicate,
    SortKey,
)


def resolve_column(model: type, field: str) -> ColumnElement:
    if field not in model.__table__.columns:
        raise ValueError(f"Unknown filter key {field!r} for {model.__name__}")
    return getattr(model, field)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _bind_value(value: Any) -> Any:
    # stored timestamps are naive UTC
    if isinstance(value, datetime):
        return to_storage(value)
    return value


def compile_predicate(model: type, predicate: Predicate) -> ColumnElement:
    """Translate ``predicate`` into a boolean clause over ``model``'s columns."""
    if isinstance(predicate, Eq):
        column = resolve_column(model, predicate.field)
        if predicate.value is None:
            return column.is_(None)
        return column == _bind_value(predicate.value)
    if isinstance(predicate, Contains):
        column = resolve_column(model, predicate.field)
        return column.ilike(f"%{_escape_like(predicate.value)}%", escape="\\")
    if isinstance(predicate, Gte):
        return resolve_column(model, predicate.field) >= _bind_value(predicate.value)
    if isinstance(predicate, Lt):
        return resolve_column(model, predicate.field) < _bind_value(predicate.value)
    if isinstance(predicate, AllOf):
        if not predicate.predicates:
            return true()
        return and_(*(compile_predicate(model, p) for p in predicate.predicates))
    if isinstance(predicate, AnyOf):
        if not predicate.predicates:
            return false()
        return or_(*(compile_predicate(model, p) for p in predicate.predicates))
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def compile_sort(model: type, sort: Sequence[SortKey]) -> list[ColumnElement]:
    clauses = []
    for key in sort:
        column = resolve_column(model, key.field)
        clauses.append(column.desc() if key.descending else column.asc())
    return clauses


__all__ = ["compile_predicate", "compile_sort", "resolve_column"]
