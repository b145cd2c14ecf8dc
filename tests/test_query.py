from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.sql.expression import True_

from regdesk.infrastructure.database.models import Registration as RegistrationModel
from regdesk.infrastructure.database.query import compile_predicate, compile_sort, resolve_column
from regdesk.modules.common.query import (
    MATCH_ALL,
    AllOf,
    AnyOf,
    Contains,
    Eq,
    Gte,
    SortKey,
    all_of,
    any_of,
    text_search,
)


def test_all_of_skips_missing_predicates():
    spec = all_of(Eq("status", "paid"), None, Gte("total_amount_cents", 100))
    assert spec == AllOf((Eq("status", "paid"), Gte("total_amount_cents", 100)))
    assert any_of(None) == AnyOf()


def test_text_search_builds_one_contains_per_field():
    spec = text_search(["team_name", "leader_name"], "  owl ")
    assert spec == AnyOf((Contains("team_name", "owl"), Contains("leader_name", "owl")))


@pytest.mark.parametrize("term", [None, "", "   "])
def test_text_search_ignores_blank_terms(term):
    assert text_search(["team_name"], term) is None


def test_unknown_filter_key_is_rejected():
    with pytest.raises(ValueError, match="Unknown filter key"):
        compile_predicate(RegistrationModel, Eq("leader.name", "Lee"))


def test_unknown_sort_key_is_rejected():
    with pytest.raises(ValueError):
        compile_sort(RegistrationModel, [SortKey("does_not_exist")])


def test_empty_all_of_matches_everything():
    assert isinstance(compile_predicate(RegistrationModel, MATCH_ALL), True_)


def test_eq_none_compiles_to_is_null():
    clause = compile_predicate(RegistrationModel, Eq("status", None))
    assert "IS NULL" in str(clause)


def test_aware_datetimes_are_bound_as_naive_utc():
    local = timezone(timedelta(hours=8))
    clause = compile_predicate(RegistrationModel, Gte("created_at", datetime(2024, 5, 1, 8, 0, tzinfo=local)))
    assert clause.right.value == datetime(2024, 5, 1, 0, 0)


def test_resolve_column_returns_model_attribute():
    assert resolve_column(RegistrationModel, "team_name") is RegistrationModel.team_name
