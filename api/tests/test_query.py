"""
Unit tests for truck sorting and filtering.
"""

import pytest

from utils.query import filter_trucks, parse_sort_spec, sort_trucks


@pytest.fixture
def trucks():
    return [
        {"id": "a", "make": "Peterbilt", "price": 85000, "status": "available",
         "created_date": "2024-01-02T00:00:00.000Z", "company_inspected": False},
        {"id": "b", "make": "freightliner", "price": 95000, "status": "sold",
         "created_date": "2024-03-01T00:00:00.000Z", "company_inspected": True},
        {"id": "c", "make": "Kenworth", "price": 9000, "status": "available",
         "created_date": "2023-12-31T23:59:59.000Z", "company_inspected": False},
    ]


def ids(records):
    return [record["id"] for record in records]


@pytest.mark.parametrize("spec,expected", [
    ("-created_date", ("created_date", True)),
    ("price", ("price", False)),
    ("", ("created_date", True)),
    (None, ("created_date", True)),
])
def test_parse_sort_spec(spec, expected):
    assert parse_sort_spec(spec) == expected


def test_sort_by_created_date_descending(trucks):
    assert ids(sort_trucks(trucks, "-created_date")) == ["b", "a", "c"]


def test_sort_by_created_date_ascending(trucks):
    assert ids(sort_trucks(trucks, "created_date")) == ["c", "a", "b"]


def test_other_fields_compare_as_text(trucks):
    # "9000" sorts after "85000" and "95000" lexicographically
    assert ids(sort_trucks(trucks, "price")) == ["a", "c", "b"]
    assert ids(sort_trucks(trucks, "-price")) == ["b", "c", "a"]


def test_text_comparison_ignores_case(trucks):
    assert ids(sort_trucks(trucks, "make")) == ["b", "c", "a"]


def test_sort_is_stable_and_does_not_mutate(trucks):
    original = list(trucks)
    result = sort_trucks(trucks, "status")

    assert ids(result) == ["a", "c", "b"]
    assert trucks == original


def test_missing_dates_sort_last_when_descending(trucks):
    trucks.append({"id": "d", "make": "Mack"})
    assert ids(sort_trucks(trucks, "-created_date"))[-1] == "d"


def test_filter_equality(trucks):
    assert ids(filter_trucks(trucks, {"status": "available"})) == ["a", "c"]


def test_filter_all_and_none_are_unconstrained(trucks):
    assert ids(filter_trucks(trucks, {"status": "all", "make": None})) == ["a", "b", "c"]
    assert ids(filter_trucks(trucks, {})) == ["a", "b", "c"]


def test_filter_is_strict(trucks):
    assert filter_trucks(trucks, {"price": "85000"}) == []
    assert filter_trucks(trucks, {"company_inspected": 1}) == []
    assert ids(filter_trucks(trucks, {"company_inspected": True})) == ["b"]
    assert filter_trucks(trucks, {"make": "peterbilt"}) == []


def test_filter_on_missing_field_excludes(trucks):
    assert filter_trucks(trucks, {"vin": "1FTFW1CT5DFC12345"}) == []
