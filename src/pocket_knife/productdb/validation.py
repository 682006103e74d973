from __future__ import annotations

import math
from typing import Any, Tuple

from ..errors import InvalidInputError


def _to_float(raw: Any) -> float:
    if isinstance(raw, bool):
        raise ValueError("booleans are not prices")
    value = float(raw.strip() if isinstance(raw, str) else raw)
    if not math.isfinite(value):
        raise ValueError("non-finite")
    return value


def validate_name(raw: Any) -> str:
    """Return the trimmed product name; empty or missing names are rejected."""
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidInputError("Product name cannot be empty", field="name", value=raw)
    return raw.strip()


def validate_price(raw: Any) -> float:
    """Parse a price; zero is allowed, negatives and non-numbers are not."""
    try:
        value = _to_float(raw)
    except (TypeError, ValueError):
        raise InvalidInputError("Price must be a valid number", field="price", value=raw) from None
    if value < 0:
        raise InvalidInputError("Price must be a positive number", field="price", value=raw)
    return value


def validate_bound(raw: Any, field: str) -> float:
    """Validate one end of a price filter as a non-negative number."""
    try:
        value = _to_float(raw)
    except (TypeError, ValueError):
        raise InvalidInputError(
            f"{field} must be a numeric value (got {raw!r})", field=field, value=raw
        ) from None
    if value < 0:
        raise InvalidInputError(
            f"{field} must be non-negative (got {value})", field=field, value=raw
        )
    return value


def validate_range(min_raw: Any, max_raw: Any) -> Tuple[float, float]:
    low = validate_bound(min_raw, "min_price")
    high = validate_bound(max_raw, "max_price")
    if low > high:
        raise InvalidInputError(
            "min_price cannot be greater than max_price",
            field="min_price",
            value=min_raw,
        )
    return low, high
