"""Tests for the history view filter."""

from datetime import date

from shopping_history.services.history import filter_history
from tests.conftest import make_record


def _milk_and_bread():
    milk = make_record("Milk", 2.5, "2024-01-01T10:00:00Z")
    bread = make_record("Bread", 3.0, "2024-01-02T10:00:00Z")
    return [bread, milk]


def test_no_filters_sorts_newest_first() -> None:
    milk = make_record("Milk", 2.5, "2024-01-01T10:00:00Z")
    bread = make_record("Bread", 3.0, "2024-01-02T10:00:00Z")

    result = filter_history([milk, bread])

    assert [r.name for r in result] == ["Bread", "Milk"]


def test_search_is_case_insensitive_substring() -> None:
    result = filter_history(_milk_and_bread(), search_term="mil")

    assert [r.name for r in result] == ["Milk"]


def test_blank_search_is_ignored() -> None:
    result = filter_history(_milk_and_bread(), search_term="   ")

    assert len(result) == 2


def test_date_filter_matches_calendar_day() -> None:
    result = filter_history(_milk_and_bread(), on_date=date(2024, 1, 2))

    assert [r.name for r in result] == ["Bread"]


def test_date_filter_uses_utc_day() -> None:
    late_local = make_record("Cheese", 4.0, "2024-01-02T01:30:00+03:00")

    assert filter_history([late_local], on_date=date(2024, 1, 1)) == [late_local]
    assert filter_history([late_local], on_date=date(2024, 1, 2)) == []


def test_both_filters_apply_together() -> None:
    records = [
        *_milk_and_bread(),
        make_record("Milk chocolate", 1.2, "2024-01-02T08:00:00Z"),
    ]

    result = filter_history(records, search_term="MILK", on_date=date(2024, 1, 2))

    assert [r.name for r in result] == ["Milk chocolate"]
    for record in result:
        assert "milk" in record.name.lower()
        assert record.date.date() == date(2024, 1, 2)


def test_ties_keep_collection_order() -> None:
    first = make_record("Apple", 1.0, "2024-01-01T10:00:00Z", record_id="a")
    second = make_record("Pear", 1.0, "2024-01-01T10:00:00Z", record_id="b")

    assert [r.id for r in filter_history([first, second])] == ["a", "b"]
    assert [r.id for r in filter_history([second, first])] == ["b", "a"]


def test_filtering_does_not_mutate_input() -> None:
    records = list(reversed(_milk_and_bread()))
    snapshot = list(records)

    filter_history(records, search_term="bread")

    assert records == snapshot
