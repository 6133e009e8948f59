from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InventorySettings:
    """
    Library settings, read from Django settings when they are configured.

    TYRE_INVENTORY_TABLE : str, default="tyres"
        Table holding the SKU rows (PostgresStore).

    TYRE_INVENTORY_REQUIRE_SECTION : bool, default=False
        Inventory variant where every SKU carries a section code.

    TYRE_INVENTORY_DEFAULT_ORDER : "asc" | "desc", default="asc"
        Width sort order used when a request does not choose one.
    """

    table: str = "tyres"
    require_section: bool = False
    default_order: str = "asc"


def get_settings() -> InventorySettings:
    from django.conf import settings

    defaults = InventorySettings()
    if not settings.configured:
        return defaults

    return InventorySettings(
        table=getattr(settings, "TYRE_INVENTORY_TABLE", defaults.table),
        require_section=bool(
            getattr(settings, "TYRE_INVENTORY_REQUIRE_SECTION", defaults.require_section)
        ),
        default_order=getattr(
            settings, "TYRE_INVENTORY_DEFAULT_ORDER", defaults.default_order
        ),
    )
