"""Derived views over the record collection."""

from collections.abc import Iterable
from datetime import UTC, date

from shopping_history.domain.records import ProductRecord


def filter_history(
    records: Iterable[ProductRecord],
    search_term: str | None = None,
    on_date: date | None = None,
) -> list[ProductRecord]:
    """Return matching records, most recent first.

    Names match case-insensitively on substring. Dates are compared on the
    UTC calendar day. Equal timestamps keep their collection order.
    """
    matches = list(records)
    if search_term and search_term.strip():
        needle = search_term.casefold()
        matches = [record for record in matches if needle in record.name.casefold()]
    if on_date is not None:
        matches = [
            record
            for record in matches
            if record.date.astimezone(UTC).date() == on_date
        ]
    return sorted(matches, key=lambda record: record.date, reverse=True)
