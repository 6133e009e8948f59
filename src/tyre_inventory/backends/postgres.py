from __future__ import annotations

import logging
from typing import Any

from django.db import DatabaseError, IntegrityError, connection, transaction

from ..conf import get_settings
from ..exceptions import DuplicateSku, StoreError
from ..models import SkuKey, TyreRecord

logger = logging.getLogger(__name__)

COLUMNS = "id, width, ratio, rim, section, quantity, created_at"

# SQLSTATE for unique_violation.
UNIQUE_VIOLATION = "23505"


def _is_unique_violation(error: IntegrityError) -> bool:
    cause = error.__cause__
    # psycopg 3 exposes `sqlstate`, psycopg2 `pgcode`.
    code = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    return code == UNIQUE_VIOLATION


class PostgresStore:
    """
    PostgreSQL store backend.

    Keeps the SKU table in PostgreSQL and talks to it through Django's
    default database connection with plain SQL.

    Key properties
    --------------
    - Uniqueness lives in the schema: a unique index over
      (width, ratio, rim, coalesce(section, '')) rejects duplicate SKUs even
      when two sessions insert the same tyre at once. The violation surfaces
      as DuplicateSku so the repository can merge and retry.
    - Every write returns the row as stored (``RETURNING``), which is what
      the caller puts into its local list.
    - Each statement runs in its own atomic block; a failed statement
      never leaves the connection in an aborted transaction.

    Limitations
    -----------
    - Requires PostgreSQL (``RETURNING``, ``IF NOT EXISTS``, expression
      indexes).
    - No quantity arithmetic in SQL: quantities are computed by the caller
      from its last known state.
    """

    def __init__(self, table: str | None = None) -> None:
        self.table = table or get_settings().table

    def ensure_schema(self) -> None:
        """
        Create the table and its unique SKU index if they do not exist.
        """
        qn = connection.ops.quote_name
        table = qn(self.table)
        index = qn(f"{self.table}_sku_key")

        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id BIGSERIAL PRIMARY KEY,
                width VARCHAR(3) NOT NULL,
                ratio VARCHAR(2) NOT NULL,
                rim VARCHAR(3) NOT NULL,
                section VARCHAR(2),
                quantity INTEGER NOT NULL CHECK (quantity > 0),
                created_at TIMESTAMPTZ NOT NULL DEFAULT now()
            );
            """
        )
        self._execute(
            f"CREATE UNIQUE INDEX IF NOT EXISTS {index} "
            f"ON {table} (width, ratio, rim, (coalesce(section, '')));"
        )

    def select_all(self) -> list[TyreRecord]:
        rows = self._execute(
            f"SELECT {COLUMNS} FROM {self._table()} ORDER BY id;", fetch="all"
        )
        return [self._record(row) for row in rows]

    def insert_row(self, key: SkuKey, quantity: int) -> TyreRecord:
        row = self._execute(
            f"INSERT INTO {self._table()} (width, ratio, rim, section, quantity) "
            f"VALUES (%s, %s, %s, %s, %s) RETURNING {COLUMNS};",
            [key.width, key.ratio, key.rim, key.section, quantity],
            fetch="one",
        )
        return self._record(row)

    def update_quantity(self, record_id: Any, quantity: int) -> TyreRecord | None:
        row = self._execute(
            f"UPDATE {self._table()} SET quantity = %s WHERE id = %s "
            f"RETURNING {COLUMNS};",
            [quantity, record_id],
            fetch="one",
        )
        return self._record(row) if row is not None else None

    def delete_row(self, record_id: Any) -> bool:
        row = self._execute(
            f"DELETE FROM {self._table()} WHERE id = %s RETURNING id;",
            [record_id],
            fetch="one",
        )
        return row is not None

    def drop_schema(self) -> None:
        """Drop the table. Intended for test teardown."""
        self._execute(f"DROP TABLE IF EXISTS {self._table()};")

    def _table(self) -> str:
        return connection.ops.quote_name(self.table)

    def _execute(self, sql: str, params: list[Any] | None = None, fetch: str | None = None):
        logger.debug("SQL %s %s", " ".join(sql.split()), params or [])
        try:
            with transaction.atomic():
                with connection.cursor() as cursor:
                    cursor.execute(sql, params)
                    if fetch == "all":
                        return cursor.fetchall()
                    if fetch == "one":
                        return cursor.fetchone()
                    return None
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateSku(str(e)) from e
            raise StoreError(str(e)) from e
        except DatabaseError as e:
            raise StoreError(str(e)) from e

    @staticmethod
    def _record(row: tuple) -> TyreRecord:
        record_id, width, ratio, rim, section, quantity, created_at = row
        return TyreRecord(
            id=record_id,
            width=width,
            ratio=ratio,
            rim=rim,
            section=section,
            quantity=quantity,
            created_at=created_at,
        )
