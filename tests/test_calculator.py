from __future__ import annotations

import pytest

from pocket_knife.calculator import CalculationRequest, calculate, parse_request
from pocket_knife.cli.main import main
from pocket_knife.errors import CalculationError, InvalidInputError


@pytest.mark.parametrize(
    "amount, pct, expected",
    [("200", "15", "30.00"), ("99.99", "10", "10.00"), ("45.50", "20", "9.10"), ("0", "50", "0.00"), ("-80", "25", "-20.00")],
)
def test_calculate(amount: str, pct: str, expected: str) -> None:
    assert str(calculate(parse_request(amount, pct))) == expected


def test_parse_request_rejects_bad_percentages() -> None:
    with pytest.raises(InvalidInputError, match="without the % symbol"):
        parse_request("100", "20%")
    with pytest.raises(InvalidInputError, match="whole number"):
        parse_request("100", "2.5")
    with pytest.raises(InvalidInputError, match="cannot be negative"):
        parse_request("100", "-5")
    with pytest.raises(InvalidInputError, match="Invalid amount"):
        parse_request("ten", "5")
    with pytest.raises(CalculationError):
        parse_request("inf", "5")


def test_calculate_rejects_invalid_request() -> None:
    with pytest.raises(CalculationError):
        calculate(CalculationRequest(percentage=-1, base=10.0))


def test_calc_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["calc", "200", "15"]) == 0
    assert capsys.readouterr().out.strip() == "30.00"
    assert main(["calc", "100", "abc"]) == 2
    assert main(["calc", "100", "-5"]) == 2
    assert main(["calc", "nan", "5"]) == 1
    assert main(["calc", "100"]) == 1
    err = capsys.readouterr().err
    assert "Error: Missing arguments." in err
    assert "Usage: pocket-knife calc <amount> <percentage>" in err
