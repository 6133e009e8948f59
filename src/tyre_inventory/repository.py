from __future__ import annotations

import logging
from typing import Any, Mapping

from . import reconciler, view
from .exceptions import DuplicateSku, StoreError, TyreInventoryError
from .models import SkuKey, TyreRecord
from .store import StoreBackend
from .validation import coerce_removal_quantity, parse_quantity, validate

logger = logging.getLogger(__name__)


def _default_backend() -> StoreBackend:
    from .backends.postgres import PostgresStore

    return PostgresStore()


class InventoryRepository:
    """
    One operator session over the SKU table.

    The table is fetched once (on first use, or on `refresh`) and afterwards
    patched from the rows the store returns for each write, so the local list
    always holds the store's version of every record it has touched.

    Parameters
    ----------
    backend : StoreBackend | None
        Store holding the table. Defaults to PostgresStore on Django's
        default database.

    require_section : bool | None
        Whether every SKU must carry a section code. Defaults to the
        TYRE_INVENTORY_REQUIRE_SECTION setting.

    Errors
    ------
    Every failure, on the add path and the remove path alike, is logged at
    the exception's ``log_level`` and re-raised. A failed store call leaves
    the local list unchanged.
    """

    def __init__(
        self,
        backend: StoreBackend | None = None,
        *,
        require_section: bool | None = None,
    ) -> None:
        if require_section is None:
            from .conf import get_settings

            require_section = get_settings().require_section

        self.backend = backend if backend is not None else _default_backend()
        self.require_section = require_section
        self._records: list[TyreRecord] | None = None
        self._removal_quantities: dict[Any, int] = {}

    def refresh(self) -> list[TyreRecord]:
        """Reload the whole table from the store."""
        try:
            self._load()
        except StoreError as exc:
            self._report(exc, "load inventory")
            raise
        return list(self._records)

    def list(self) -> list[TyreRecord]:
        if self._records is None:
            return self.refresh()
        return list(self._records)

    def add(
        self,
        width: Any,
        ratio: Any,
        rim: Any,
        section: Any = None,
        quantity: Any = "1",
    ) -> TyreRecord:
        """
        Register ``quantity`` units of a tyre, merging into an existing SKU.

        If the store has gained the same SKU behind this session's back
        (DuplicateSku on insert), or the row to increase has vanished, the
        list is reloaded and the change reconciled once more.
        """
        try:
            key = validate(width, ratio, rim, section, require_section=self.require_section)
            delta = parse_quantity(quantity)
        except TyreInventoryError as exc:
            self._report(exc, "add tyre")
            raise

        try:
            record = self._add(key, delta)
        except DuplicateSku as exc:
            logger.warning("Conflict adding %s, reloading: %s", key.label, exc)
            record = self._retry_add(key, delta)
        except StoreError as exc:
            self._report(exc, f"add {key.label}")
            raise

        if record is None:
            logger.warning("Row for %s disappeared, reloading", key.label)
            record = self._retry_add(key, delta)
        return record

    def remove(self, record_id: Any, quantity: Any = None) -> TyreRecord | None:
        """
        Take units out of a record, deleting it when none would remain.

        ``quantity`` defaults to the pending removal quantity for the row.
        Returns the updated record, or None when the record was deleted (or
        did not exist).
        """
        try:
            if quantity is None:
                count = self.removal_quantity(record_id)
            else:
                count = coerce_removal_quantity(quantity)
            action = reconciler.withdraw(self._current(), record_id, count)
        except TyreInventoryError as exc:
            self._report(exc, f"remove tyre {record_id}")
            raise

        if action is None:
            logger.debug("No tyre with id %r, nothing to remove", record_id)
            return None

        try:
            if isinstance(action, reconciler.Delete):
                self.backend.delete_row(action.record_id)
                row = None
            else:
                row = self.backend.update_quantity(action.record_id, action.quantity)
                if row is None:
                    action = reconciler.Delete(action.record_id)
        except StoreError as exc:
            self._report(exc, f"remove tyre {record_id}")
            raise

        self._records = reconciler.apply(self._current(), action, row)
        self._removal_quantities.pop(record_id, None)

        if row is None:
            logger.info("Removed tyre %r", record_id)
        else:
            logger.info("Tyre %s now at %d", row.label, row.quantity)
        return row

    def removal_quantity(self, record_id: Any) -> int:
        return self._removal_quantities.get(record_id, 1)

    def set_removal_quantity(self, record_id: Any, value: Any) -> int:
        """Store the pending removal input for a row (1 when unset or non-numeric)."""
        try:
            count = coerce_removal_quantity(value)
        except TyreInventoryError as exc:
            self._report(exc, f"set removal quantity for {record_id}")
            raise
        self._removal_quantities[record_id] = count
        return count

    def display(
        self,
        terms: Mapping[str, str | None] | None = None,
        order: view.Order = "asc",
    ) -> list[TyreRecord]:
        return view.display(self.list(), terms, order)

    def _current(self) -> list[TyreRecord]:
        if self._records is None:
            self._load()
        return self._records

    def _load(self) -> None:
        self._records = list(self.backend.select_all())
        logger.debug("Loaded %d tyre records", len(self._records))

    def _add(self, key: SkuKey, delta: int) -> TyreRecord | None:
        action = reconciler.upsert(self._current(), key, delta)

        if isinstance(action, reconciler.Insert):
            row = self.backend.insert_row(action.key, action.quantity)
            logger.info("Registered %s with %d in stock", key.label, row.quantity)
        else:
            row = self.backend.update_quantity(action.record_id, action.quantity)
            if row is None:
                return None
            logger.info("Added %d to %s, now %d", delta, key.label, row.quantity)

        self._records = reconciler.apply(self._current(), action, row)
        return row

    def _retry_add(self, key: SkuKey, delta: int) -> TyreRecord:
        try:
            self._load()
            record = self._add(key, delta)
            if record is None:
                raise StoreError(f"Tyre {key.label} changed during update, try again.")
        except StoreError as exc:
            self._report(exc, f"add {key.label}")
            raise
        return record

    @staticmethod
    def _report(exc: TyreInventoryError, action: str) -> None:
        logger.log(exc.log_level, "Could not %s: %s", action, exc)
