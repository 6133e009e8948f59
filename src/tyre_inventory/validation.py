from __future__ import annotations

import re
from typing import Any

from .exceptions import InvalidFormat, InvalidQuantity
from .models import SkuKey

# ASCII-only classes: ``\d`` would also accept other Unicode digits.
PATTERNS = {
    "width": re.compile(r"[0-9]{3}"),
    "ratio": re.compile(r"[0-9]{2}"),
    "rim": re.compile(r"[A-Za-z0-9]{2,3}"),
    "section": re.compile(r"[A-Za-z][0-9]"),
}

_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")


def _matches(field: str, value: Any) -> bool:
    return isinstance(value, str) and PATTERNS[field].fullmatch(value) is not None


def validate(
    width: Any,
    ratio: Any,
    rim: Any,
    section: Any = None,
    *,
    require_section: bool = False,
) -> SkuKey:
    """
    Check the shape of a SKU and return its normalised key.

    Fields are checked in the fixed order width, ratio, rim, section; the
    first failure raises InvalidFormat naming that field. An empty section
    counts as absent unless ``require_section`` is set.
    """
    for field, value in (("width", width), ("ratio", ratio), ("rim", rim)):
        if not _matches(field, value):
            raise InvalidFormat(field)

    if section is None or section == "":
        if require_section:
            raise InvalidFormat("section")
        section = None
    elif not _matches("section", section):
        raise InvalidFormat("section")

    return SkuKey(width, ratio, rim, section)


def parse_quantity(value: Any) -> int:
    """
    Parse a quantity to add. Must be a whole number >= 1.
    """
    if isinstance(value, bool):
        raise InvalidQuantity()

    if isinstance(value, int):
        quantity = value
    elif isinstance(value, str) and _INTEGER.fullmatch(value):
        quantity = int(value)
    else:
        raise InvalidQuantity()

    if quantity < 1:
        raise InvalidQuantity()
    return quantity


def coerce_removal_quantity(value: Any) -> int:
    """
    Removal quantity as the per-row input sends it.

    Unset or non-numeric input falls back to 1; a number below 1 is rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return 1
    if isinstance(value, str) and not _INTEGER.fullmatch(value):
        return 1
    return parse_quantity(value)
