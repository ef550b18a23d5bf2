"""
Field probing helpers shared by the payload adapters.
"""

import math
from collections.abc import Mapping
from typing import Any


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def first_text(source: Mapping[str, Any], *keys: str) -> str | None:
    """First non-empty value among ``keys``, as a string."""
    for key in keys:
        value = source.get(key)
        if value is None or value == "":
            continue
        return value if isinstance(value, str) else str(value)
    return None


def as_number(value: Any) -> float | None:
    """Finite float from a JSON number or numeric string; anything else is None."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None
