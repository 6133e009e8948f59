from __future__ import annotations

from typing import Iterable, Literal, Mapping

from .models import FIELDS, TyreRecord

Order = Literal["asc", "desc"]

ORDERS = ("asc", "desc")


def filter_records(
    records: Iterable[TyreRecord], terms: Mapping[str, str | None] | None = None
) -> list[TyreRecord]:
    """
    Keep records whose fields contain every non-empty search term.

    Matching is case-insensitive substring containment: searching rim "16"
    keeps "16" and "216". Fields missing from ``terms`` are unconstrained.
    """
    active = {}
    for field, term in (terms or {}).items():
        if field not in FIELDS:
            raise ValueError(
                f"Unknown search field {field!r}. Available: {list(FIELDS)}"
            )
        if term:
            active[field] = term.lower()

    def keep(record: TyreRecord) -> bool:
        return all(
            needle in (getattr(record, field) or "").lower()
            for field, needle in active.items()
        )

    return [record for record in records if keep(record)]


def sort_records(records: Iterable[TyreRecord], order: Order = "asc") -> list[TyreRecord]:
    """
    Order records by the numeric value of their width.

    The sort is stable in both directions. Widths that are not base-10
    integers go last, in their original order.
    """
    if order not in ORDERS:
        raise ValueError(f"Unknown sort order {order!r}. Available: {list(ORDERS)}")

    numeric, other = [], []
    for record in records:
        try:
            numeric.append((int(record.width, 10), record))
        except (TypeError, ValueError):
            other.append(record)

    numeric.sort(key=lambda pair: pair[0], reverse=(order == "desc"))
    return [record for _, record in numeric] + other


def display(
    records: Iterable[TyreRecord],
    terms: Mapping[str, str | None] | None = None,
    order: Order = "asc",
) -> list[TyreRecord]:
    """Filter, then sort. Recomputed from the full list on every call."""
    return sort_records(filter_records(records, terms), order)
