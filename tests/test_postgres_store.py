"""
PostgreSQL store integration tests.

These tests run against a real database (not mocks):
- The unique SKU index must reject a second row for the same tyre.
- Two sessions adding the same tyre at once must end with one merged row.

They require a reachable PostgreSQL instance via DATABASE_URL.
CI provides PostgreSQL automatically; locally you can use docker compose.
"""

import os
import threading
from urllib.parse import urlparse

import pytest

from tyre_inventory import DuplicateSku, InventoryRepository
from tyre_inventory.models import SkuKey

TABLE = "test_tyres"


def _configure_django_if_needed() -> None:
    """Configure a minimal Django DB setup from DATABASE_URL (once per test run)."""
    from django.conf import settings

    if settings.configured:
        return

    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL is not set; skipping PostgreSQL store tests.")

    u = urlparse(database_url)
    if u.scheme not in {"postgres", "postgresql"}:
        pytest.skip(f"Unsupported DATABASE_URL scheme: {u.scheme!r}")

    settings.configure(
        SECRET_KEY="test",
        INSTALLED_APPS=[],
        DATABASES={
            "default": {
                "ENGINE": "django.db.backends.postgresql",
                "NAME": (u.path or "").lstrip("/"),
                "USER": u.username or "",
                "PASSWORD": u.password or "",
                "HOST": u.hostname or "localhost",
                "PORT": str(u.port or 5432),
                "CONN_MAX_AGE": 0,
            }
        },
        TIME_ZONE="UTC",
        USE_TZ=True,
        TYRE_INVENTORY_TABLE=TABLE,
    )

    import django

    django.setup()


@pytest.fixture
def store():
    _configure_django_if_needed()

    from tyre_inventory.backends.postgres import PostgresStore

    store = PostgresStore(TABLE)
    store.drop_schema()
    store.ensure_schema()
    yield store
    store.drop_schema()
    _close_thread_connection()


def _close_thread_connection() -> None:
    """Close the thread-local DB connection to avoid leaks between tests."""
    from django.db import connections

    connections["default"].close()


def test_rows_round_trip_through_the_table(store):
    row = store.insert_row(SkuKey("205", "55", "16", "a1"), 2)

    assert row.id is not None
    assert row.created_at is not None
    assert row.section == "A1"
    assert store.select_all() == [row]

    assert store.update_quantity(row.id, 5).quantity == 5
    assert store.update_quantity(row.id + 1000, 5) is None
    assert store.delete_row(row.id) is True
    assert store.delete_row(row.id) is False
    assert store.select_all() == []


def test_unique_index_rejects_duplicate_sku(store):
    store.insert_row(SkuKey("205", "55", "16"), 1)

    with pytest.raises(DuplicateSku):
        store.insert_row(SkuKey("205", "55", "16"), 1)

    # Different section, or none vs some, is a different SKU.
    store.insert_row(SkuKey("205", "55", "16", "A1"), 1)
    assert len(store.select_all()) == 2


def test_concurrent_sessions_merge_into_one_row(store):
    """Two sessions that both decide "insert" must end with one row of 5."""
    sessions = [
        InventoryRepository(store, require_section=False),
        InventoryRepository(store, require_section=False),
    ]
    for repo in sessions:
        repo.list()

    barrier = threading.Barrier(2, timeout=5.0)
    errors: list[BaseException] = []

    def add(repo: InventoryRepository, quantity: str) -> None:
        try:
            barrier.wait()
            repo.add("205", "55", "16", quantity=quantity)
        except BaseException as e:
            errors.append(e)
        finally:
            _close_thread_connection()

    threads = [
        threading.Thread(target=add, args=(sessions[0], "2"), name="session-a"),
        threading.Thread(target=add, args=(sessions[1], "3"), name="session-b"),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10.0)

    assert errors == []
    rows = store.select_all()
    assert len(rows) == 1
    assert rows[0].quantity == 5
