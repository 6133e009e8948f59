"""
Decide how a requested quantity change maps onto store operations.

Everything here is a pure function of the current record list: the caller
runs the returned action against the store and then feeds the store's
answer back through `apply`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Union

from .exceptions import InvalidQuantity
from .models import SkuKey, TyreRecord


@dataclass(frozen=True)
class Insert:
    key: SkuKey
    quantity: int


@dataclass(frozen=True)
class Increase:
    """Set an existing record's quantity to ``quantity`` (current + delta)."""

    record_id: Any
    quantity: int


@dataclass(frozen=True)
class Decrease:
    """Set an existing record's quantity to ``quantity`` (current - removed)."""

    record_id: Any
    quantity: int


@dataclass(frozen=True)
class Delete:
    record_id: Any


Action = Union[Insert, Increase, Decrease, Delete]


def find_by_key(records: Iterable[TyreRecord], key: SkuKey) -> TyreRecord | None:
    for record in records:
        if record.key == key:
            return record
    return None


def find_by_id(records: Iterable[TyreRecord], record_id: Any) -> TyreRecord | None:
    for record in records:
        if record.id == record_id:
            return record
    return None


def upsert(records: Iterable[TyreRecord], key: SkuKey, delta: int) -> Insert | Increase:
    """
    Merge ``delta`` units of ``key`` into the inventory.

    Returns Increase when a record with the same key exists (its id is kept),
    otherwise Insert for a brand new row.
    """
    if delta < 1:
        raise InvalidQuantity()

    existing = find_by_key(records, key)
    if existing is None:
        return Insert(key, delta)
    return Increase(existing.id, existing.quantity + delta)


def withdraw(
    records: Iterable[TyreRecord], record_id: Any, remove_quantity: int
) -> Delete | Decrease | None:
    """
    Take ``remove_quantity`` units out of the record ``record_id``.

    Returns None when no such record exists. Removing as many units as are
    on hand (or more) deletes the row; a record never persists at zero.
    """
    if remove_quantity < 1:
        raise InvalidQuantity()

    existing = find_by_id(records, record_id)
    if existing is None:
        return None
    if remove_quantity >= existing.quantity:
        return Delete(existing.id)
    return Decrease(existing.id, existing.quantity - remove_quantity)


def apply(
    records: Iterable[TyreRecord], action: Action, row: TyreRecord | None = None
) -> list[TyreRecord]:
    """
    Return the record list after the store has confirmed ``action``.

    ``row`` is the store's copy of the affected record; it is required for
    Insert (the store assigns id and timestamp) and preferred for quantity
    changes, where the record keeps its position in the list.
    """
    records = list(records)

    if isinstance(action, Insert):
        if row is None:
            raise ValueError("Insert needs the row returned by the store")
        return records + [row]

    if isinstance(action, Delete):
        return [r for r in records if r.id != action.record_id]

    result = []
    for record in records:
        if record.id == action.record_id:
            record = row if row is not None else record.with_quantity(action.quantity)
        result.append(record)
    return result
