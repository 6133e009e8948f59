from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

FIELDS = ("width", "ratio", "rim", "section")


@dataclass(frozen=True)
class SkuKey:
    """
    Identifying key of a tyre SKU, e.g. 205/55/16 or 215/65/16C A1.

    Section is optional (only one inventory variant uses it) and is stored
    upper-cased, so keys compare case-insensitively on section.
    """

    width: str
    ratio: str
    rim: str
    section: str | None = None

    def __post_init__(self) -> None:
        section = self.section.upper() if self.section else None
        object.__setattr__(self, "section", section)

    @property
    def label(self) -> str:
        base = f"{self.width}/{self.ratio}/{self.rim}"
        return f"{base} {self.section}" if self.section else base

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class TyreRecord:
    """
    One stored SKU row.

    ``id`` and ``created_at`` are assigned by the store and opaque here.
    """

    id: Any
    width: str
    ratio: str
    rim: str
    quantity: int
    section: str | None = None
    created_at: Any = None

    @property
    def key(self) -> SkuKey:
        return SkuKey(self.width, self.ratio, self.rim, self.section)

    @property
    def label(self) -> str:
        return self.key.label

    def with_quantity(self, quantity: int) -> "TyreRecord":
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict[str, Any]:
        created_at = self.created_at
        if hasattr(created_at, "isoformat"):
            created_at = created_at.isoformat()
        return {
            "id": self.id,
            "width": self.width,
            "ratio": self.ratio,
            "rim": self.rim,
            "section": self.section,
            "quantity": self.quantity,
            "created_at": created_at,
            "label": self.label,
        }
