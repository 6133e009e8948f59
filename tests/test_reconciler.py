import pytest

from tyre_inventory import reconciler
from tyre_inventory.exceptions import InvalidQuantity
from tyre_inventory.models import SkuKey, TyreRecord
from tyre_inventory.reconciler import Decrease, Delete, Increase, Insert


def tyre(id, width="205", ratio="55", rim="16", quantity=2, section=None):
    return TyreRecord(
        id=id, width=width, ratio=ratio, rim=rim, quantity=quantity, section=section
    )


def test_upsert_existing_key_increases_quantity():
    records = [tyre(1, quantity=2)]

    action = reconciler.upsert(records, SkuKey("205", "55", "16"), 3)

    assert action == Increase(1, 5)


def test_upsert_new_key_inserts():
    records = [tyre(1)]
    key = SkuKey("195", "65", "15")

    assert reconciler.upsert(records, key, 4) == Insert(key, 4)


def test_upsert_matches_section_case_insensitively():
    records = [tyre(7, section="A1", quantity=1)]

    action = reconciler.upsert(records, SkuKey("205", "55", "16", "a1"), 1)

    assert action == Increase(7, 2)


def test_upsert_treats_sectioned_and_plain_keys_as_distinct():
    records = [tyre(7, section="A1")]
    key = SkuKey("205", "55", "16")

    assert isinstance(reconciler.upsert(records, key, 1), Insert)


def test_upsert_rejects_non_positive_delta():
    with pytest.raises(InvalidQuantity):
        reconciler.upsert([], SkuKey("205", "55", "16"), 0)


def test_withdraw_everything_deletes():
    records = [tyre(1, quantity=2)]

    assert reconciler.withdraw(records, 1, 5) == Delete(1)
    assert reconciler.withdraw(records, 1, 2) == Delete(1)


def test_withdraw_part_decreases():
    records = [tyre(1, quantity=2)]

    assert reconciler.withdraw(records, 1, 1) == Decrease(1, 1)


def test_withdraw_unknown_id_is_noop():
    assert reconciler.withdraw([tyre(1)], 99, 1) is None


def test_withdraw_rejects_non_positive_quantity():
    with pytest.raises(InvalidQuantity):
        reconciler.withdraw([tyre(1)], 1, 0)


def test_apply_insert_appends_store_row():
    records = [tyre(1)]
    row = tyre(2, width="195")

    result = reconciler.apply(records, Insert(row.key, 2), row)

    assert result == [tyre(1), row]
    assert records == [tyre(1)]


def test_apply_insert_requires_row():
    with pytest.raises(ValueError):
        reconciler.apply([], Insert(SkuKey("205", "55", "16"), 1))


def test_apply_increase_keeps_identity_and_position():
    records = [tyre(1, quantity=2), tyre(2, width="195")]

    result = reconciler.apply(records, Increase(1, 5))

    assert [r.id for r in result] == [1, 2]
    assert result[0].quantity == 5
    assert result[0].key == records[0].key


def test_apply_prefers_store_row():
    stored = tyre(1, quantity=9)

    result = reconciler.apply([tyre(1, quantity=2)], Decrease(1, 1), stored)

    assert result == [stored]


def test_apply_delete_drops_record():
    records = [tyre(1), tyre(2, width="195")]

    assert [r.id for r in reconciler.apply(records, Delete(1))] == [2]


def test_scenario_merge_then_withdraw():
    records = [tyre(1, quantity=2)]

    action = reconciler.upsert(records, SkuKey("205", "55", "16"), 3)
    records = reconciler.apply(records, action)
    assert len(records) == 1
    assert records[0].quantity == 5

    action = reconciler.withdraw(records, 1, 5)
    assert reconciler.apply(records, action) == []
