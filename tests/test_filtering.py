import pytest

from services.shared import config
from services.shared.filtering import UNDEFINED, calendar_day, filter_resources, resolve_path

ORDERS = [
    {
        "id": "1",
        "state": "acknowledged",
        "priority": "4",
        "requestedStartDate": "2024-05-03T23:59:00Z",
        "completionDate": None,
        "productOrderItem": [{"state": "acknowledged", "quantity": 2}],
        "channel": [],
    },
    {
        "id": "2",
        "state": "inProgress",
        "priority": "1",
        "requestedStartDate": "2024-05-04T08:00:00Z",
        "completionDate": "2024-05-06T10:00:00Z",
    },
    {
        "id": "3",
        "state": "Completed",
        "isBundle": True,
    },
]


def ids(items):
    return [item["id"] for item in items]


def test_empty_constraints_return_everything():
    assert filter_resources(ORDERS, {}) == ORDERS
    assert filter_resources(ORDERS, {"fields": "id", "limit": "1", "offset": "0"}) == ORDERS


def test_case_insensitive_equality():
    assert ids(filter_resources(ORDERS, {"state": "completed"})) == ["3"]


def test_missing_path_matches_vacuously():
    # 3 has no priority, so it survives the filter
    assert ids(filter_resources(ORDERS, {"priority": "4"})) == ["1", "3"]


def test_null_matches_only_literal_null():
    assert ids(filter_resources(ORDERS, {"completionDate": "null"})) == ["1", "3"]
    assert ids(filter_resources(ORDERS, {"completionDate": None})) == ["1", "3"]


def test_date_constraints_match_by_calendar_day():
    assert ids(filter_resources(ORDERS, {"requestedStartDate": "2024-05-03"})) == ["1", "3"]
    assert ids(filter_resources(ORDERS, {"requestedStartDate": "2024-05-03T00:00:01Z"})) == ["1", "3"]
    assert ids(filter_resources(ORDERS, {"requestedStartDate": "2024-05-04"})) == ["2", "3"]


def test_unparseable_date_does_not_match_a_real_date():
    assert ids(filter_resources(ORDERS, {"requestedStartDate": "not-a-date"})) == ["3"]


def test_dot_path_into_lists():
    assert ids(filter_resources(ORDERS, {"productOrderItem.0.quantity": "2"})) == ["1", "2", "3"]
    assert ids(filter_resources(ORDERS, {"productOrderItem.0.quantity": "5"})) == ["2", "3"]


def test_booleans_compare_as_lowercase_strings():
    assert ids(filter_resources(ORDERS, {"isBundle": "TRUE"})) == ["1", "2", "3"]
    assert ids(filter_resources(ORDERS, {"isBundle": "false"})) == ["1", "2"]


def test_constraints_are_anded():
    assert ids(filter_resources(ORDERS, {"state": "inProgress", "priority": "4"})) == []


def test_result_is_subset():
    for constraint in ({"state": "x"}, {"priority": "1"}, {"a.b.c": "d"}):
        result = filter_resources(ORDERS, constraint)
        assert all(item in ORDERS for item in result)


def test_resolve_path_stops_at_falsy_intermediate():
    assert resolve_path({"a": None}, "a.b") is UNDEFINED
    assert resolve_path({"a": {"b": 0}}, "a.b") == 0
    assert resolve_path({"a": [1]}, "a.3") is UNDEFINED


def test_calendar_day_uses_configured_zone(monkeypatch):
    assert str(calendar_day("2024-05-03T23:59:00Z")) == "2024-05-03"
    monkeypatch.setattr(config, "TMF_TIMEZONE", "Asia/Colombo")
    assert str(calendar_day("2024-05-03T23:59:00Z")) == "2024-05-04"


@pytest.mark.parametrize("value", [None, 42, "", "tomorrow", "31/31/2024"])
def test_calendar_day_rejects_unreadable_values(value):
    assert calendar_day(value) is None


@pytest.mark.parametrize(
    "value", ["05/03/2024", "05/03/2024 18:30", "2024/05/03 01:00:00", "May 3, 2024", "3 May 2024"]
)
def test_calendar_day_reads_loose_date_forms(value):
    assert str(calendar_day(value)) == "2024-05-03"


def test_loose_date_constraint_matches_iso_value():
    assert ids(filter_resources(ORDERS, {"requestedStartDate": "05/03/2024"})) == ["1", "3"]
