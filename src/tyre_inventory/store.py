from __future__ import annotations

from typing import Any, Protocol

from .models import SkuKey, TyreRecord


class StoreBackend(Protocol):
    """
    Protocol describing the external store holding the SKU table.

    Four operations, each raising StoreError on failure. This allows
    alternative implementations (e.g. a hosted REST table) without changing
    the repository.
    """
    def select_all(self) -> list[TyreRecord]: ...

    def insert_row(self, key: SkuKey, quantity: int) -> TyreRecord:
        """Insert a new row; raise DuplicateSku if ``key`` is already stored."""
        ...

    def update_quantity(self, record_id: Any, quantity: int) -> TyreRecord | None:
        """Set a row's quantity; return the stored row, or None if it is gone."""
        ...

    def delete_row(self, record_id: Any) -> bool:
        """Delete a row; return False if it was already gone."""
        ...
