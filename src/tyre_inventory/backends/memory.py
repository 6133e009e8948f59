from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Any

from ..exceptions import DuplicateSku
from ..models import SkuKey, TyreRecord

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    In-process store backend.

    Behaves like the hosted table: it assigns ids and creation timestamps,
    and rejects a second row for an existing SKU key with DuplicateSku.
    Rows live only as long as the instance; useful for tests and demos.

    Thread safety
    -------------
    Every operation runs under one lock, so several repositories may share
    an instance the way several sessions share a real store.
    """

    def __init__(self, rows: list[TyreRecord] | None = None) -> None:
        self._lock = threading.RLock()
        self._rows: dict[Any, TyreRecord] = {}
        for row in rows or []:
            self._rows[row.id] = row

        seeded = [i for i in self._rows if isinstance(i, int)]
        self._ids = itertools.count(max(seeded, default=0) + 1)

    def select_all(self) -> list[TyreRecord]:
        with self._lock:
            return list(self._rows.values())

    def insert_row(self, key: SkuKey, quantity: int) -> TyreRecord:
        with self._lock:
            if any(row.key == key for row in self._rows.values()):
                raise DuplicateSku(
                    f"duplicate key value violates unique constraint: {key.label}"
                )

            row = TyreRecord(
                id=next(self._ids),
                width=key.width,
                ratio=key.ratio,
                rim=key.rim,
                section=key.section,
                quantity=quantity,
                created_at=datetime.now(timezone.utc),
            )
            self._rows[row.id] = row
            logger.debug("Inserted row %s (%s x%d)", row.id, key.label, quantity)
            return row

    def update_quantity(self, record_id: Any, quantity: int) -> TyreRecord | None:
        with self._lock:
            row = self._rows.get(record_id)
            if row is None:
                return None
            row = self._rows[record_id] = row.with_quantity(quantity)
            return row

    def delete_row(self, record_id: Any) -> bool:
        with self._lock:
            return self._rows.pop(record_id, None) is not None
