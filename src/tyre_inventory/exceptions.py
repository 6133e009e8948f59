"""
Exception hierarchy for tyre_inventory.

This module defines all public exceptions raised by the library.

Both the add and the remove paths report failures through these classes:
the repository logs each one at its ``log_level`` and re-raises it, so the
caller decides how to show it. Catch `TyreInventoryError` to handle every
library failure, or `ValidationError` / `StoreError` to tell bad input apart
from a failing store.
"""
from __future__ import annotations

import logging


class TyreInventoryError(Exception):
    """
    Base exception for all tyre_inventory errors.

    Example
    -------
    >>> try:
    ...     repo.add("205", "55", "16", quantity="2")
    ... except TyreInventoryError as exc:
    ...     show_inline(str(exc))
    """

    #: Stable error code for programmatic handling (e.g. JSON responses).
    code: str = "tyre_inventory_error"

    #: Level the repository logs this error at before re-raising it.
    log_level: int = logging.ERROR

    default_message: str = "An unspecified tyre inventory error occurred."

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = self.default_message
        super().__init__(message)


class ValidationError(TyreInventoryError):
    """
    Raised before any store call when operator input is malformed.
    """

    code: str = "validation_error"
    log_level: int = logging.INFO


class InvalidFormat(ValidationError):
    """
    Raised when a SKU field does not match its expected shape.

    The ``field`` attribute names the first failing field, checked in the
    order width, ratio, rim, section.
    """

    code: str = "invalid_format"

    messages = {
        "width": "Tyre width must be exactly 3 digits.",
        "ratio": "Ratio must be exactly 2 digits.",
        "rim": "Rim must be 2 to 3 alphanumeric characters.",
        "section": "Section must be one letter followed by one digit.",
    }

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        if message is None:
            message = self.messages.get(field, f"Invalid value for {field!r}.")
        super().__init__(message)


class InvalidQuantity(ValidationError):
    """
    Raised when a quantity is non-numeric or smaller than 1.
    """

    code: str = "invalid_quantity"
    default_message: str = "Quantity must be a whole number of at least 1."


class StoreError(TyreInventoryError):
    """
    Raised when the external store fails an operation.

    The message is the store's own error text, shown verbatim. The in-memory
    inventory is left unchanged when this is raised.
    """

    code: str = "store_error"
    default_message: str = "The inventory store failed to complete the request."


class DuplicateSku(StoreError):
    """
    Raised when the store rejects an insert because the SKU key already exists.

    Common causes
    -------------
    - Another session registered the same tyre since the list was loaded
    - The local list is stale relative to the store

    The repository treats this as a merge-and-retry case: it reloads the
    list and turns the insert into a quantity increase.
    """

    code: str = "duplicate_sku"
    log_level: int = logging.WARNING
    default_message: str = "Tyre number already exists."
