from .exceptions import (
    DuplicateSku,
    InvalidFormat,
    InvalidQuantity,
    StoreError,
    TyreInventoryError,
    ValidationError,
)
from .models import SkuKey, TyreRecord
from .repository import InventoryRepository
from .validation import validate

__all__ = [
    "InventoryRepository",
    "SkuKey",
    "TyreRecord",
    "validate",
    "TyreInventoryError",
    "ValidationError",
    "InvalidFormat",
    "InvalidQuantity",
    "StoreError",
    "DuplicateSku",
]
