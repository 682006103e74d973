from __future__ import annotations

import pytest

from pocket_knife.errors import InvalidInputError
from pocket_knife.productdb.models import format_price
from pocket_knife.productdb.validation import validate_name, validate_price, validate_range


def test_validate_name_trims_and_rejects_blank() -> None:
    assert validate_name("  Coffee Beans ") == "Coffee Beans"
    for raw in (None, "", "   ", 42):
        with pytest.raises(InvalidInputError) as exc:
            validate_name(raw)
        assert exc.value.field == "name"


def test_validate_price_accepts_zero_ints_and_numeric_strings() -> None:
    assert validate_price(0) == 0.0
    assert validate_price("12.99") == 12.99
    assert validate_price(" 7 ") == 7.0


@pytest.mark.parametrize("raw", ["abc", "", None, "nan", "inf", True])
def test_validate_price_rejects_non_numbers(raw: object) -> None:
    with pytest.raises(InvalidInputError, match="must be a valid number") as exc:
        validate_price(raw)
    assert exc.value.field == "price"
    assert exc.value.value == raw


def test_validate_price_rejects_negative() -> None:
    with pytest.raises(InvalidInputError, match="must be a positive number"):
        validate_price("-0.01")


def test_validate_range_checks_each_bound_and_order() -> None:
    assert validate_range("1", 5) == (1.0, 5.0)
    assert validate_range(3, 3) == (3.0, 3.0)
    with pytest.raises(InvalidInputError, match="min_price must be non-negative"):
        validate_range(-1, 5)
    with pytest.raises(InvalidInputError, match="max_price must be a numeric value"):
        validate_range(1, "lots")
    with pytest.raises(InvalidInputError, match="cannot be greater"):
        validate_range(10, 2)


@pytest.mark.parametrize(
    "value, expected",
    [(12.995, "$13.00"), (0, "$0.00"), (999.99, "$999.99"), (3.5, "$3.50"), (1.005, "$1.01"), (200, "$200.00")],
)
def test_format_price_rounds_half_up(value: float, expected: str) -> None:
    assert format_price(value) == expected


def test_format_price_handles_large_magnitudes() -> None:
    assert format_price(1e30) == "$1" + "0" * 30 + ".00"
    assert format_price(1.7976931348623157e308) == "$17976931348623157" + "0" * 292 + ".00"
    assert validate_price("1e30") == 1e30
