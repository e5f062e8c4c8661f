"""
Tests for StructuredQuery validation and result paging.
"""

import pytest
from pydantic import ValidationError

from car_query_builder.core.models import SearchParams, SearchResult, StructuredQuery


def test_all_fields_are_optional():
    query = StructuredQuery.model_validate({})
    assert query.query is None
    assert query.filter_by is None
    assert query.sort_by is None


def test_blank_strings_become_none():
    query = StructuredQuery.model_validate({"query": "  ", "filter_by": "", "sort_by": ""})
    assert query.model_dump() == {"query": None, "filter_by": None, "sort_by": None}


def test_unknown_keys_are_rejected():
    with pytest.raises(ValidationError, match="filter"):
        StructuredQuery.model_validate({"filter": "make:BMW", "sort": "year:desc"})


def test_filter_is_normalized():
    query = StructuredQuery.model_validate({"filter_by": "make:BMW || make:Honda"})
    assert query.filter_by == "make:[BMW,Honda]"


def test_invalid_filter_grammar_is_rejected():
    with pytest.raises(ValidationError):
        StructuredQuery.model_validate({"filter_by": "make BMW"})


def test_at_most_three_sort_fields():
    assert StructuredQuery(sort_by="year:desc,msrp:asc,engine_hp:desc").sort_by == (
        "year:desc,msrp:asc,engine_hp:desc"
    )
    with pytest.raises(ValidationError, match="at most 3"):
        StructuredQuery(sort_by="year:desc,msrp:asc,engine_hp:desc,city_mpg:desc")


def test_catalog_context_rejects_unknown_filter_field(catalog):
    with pytest.raises(ValidationError, match="Unknown field 'color'"):
        StructuredQuery.model_validate({"filter_by": "color:red"}, context={"catalog": catalog})


def test_catalog_context_rejects_non_filterable_field(catalog):
    with pytest.raises(ValidationError, match="not filterable"):
        StructuredQuery.model_validate({"filter_by": "vin:123"}, context={"catalog": catalog})


def test_catalog_context_rejects_non_sortable_field(catalog):
    with pytest.raises(ValidationError, match="not sortable"):
        StructuredQuery.model_validate({"sort_by": "make:asc"}, context={"catalog": catalog})


def test_text_match_is_always_sortable(catalog):
    query = StructuredQuery.model_validate(
        {"query": "mustang", "sort_by": "_text_match:desc,year:desc"}, context={"catalog": catalog}
    )
    assert query.sort_by == "_text_match:desc,year:desc"


def test_values_outside_known_enums_are_accepted(catalog):
    # Enum values guide the model; they do not restrict what the index accepts.
    query = StructuredQuery.model_validate(
        {"filter_by": "make:Lamborghini"}, context={"catalog": catalog}
    )
    assert query.filter_by == "make:Lamborghini"


def test_search_params_omit_empty_filter():
    params = SearchParams(query_by="make,model", sort_by="popularity:desc")
    assert "filter_by" not in params.to_request()
    assert params.to_request()["q"] == "*"


@pytest.mark.parametrize(
    "page, per_page, found, expected",
    [
        (1, 12, 30, 2),
        (2, 12, 30, 3),
        (3, 12, 30, None),
        (1, 12, 12, None),
        (1, 12, 0, None),
    ],
)
def test_next_page(page, per_page, found, expected):
    assert SearchResult(page=page, per_page=per_page, found=found).next_page == expected
