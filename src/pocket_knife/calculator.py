from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .errors import CalculationError, InvalidInputError


@dataclass(frozen=True)
class CalculationRequest:
    percentage: int
    base: float

    @property
    def valid(self) -> bool:
        return (
            isinstance(self.percentage, int)
            and not isinstance(self.percentage, bool)
            and self.percentage >= 0
            and isinstance(self.base, (int, float))
            and math.isfinite(self.base)
        )


@dataclass(frozen=True)
class CalculationResult:
    value: float
    request: CalculationRequest

    @property
    def formatted_value(self) -> str:
        return f"{self.value:.2f}"

    def __str__(self) -> str:
        return self.formatted_value


def calculate(request: CalculationRequest) -> CalculationResult:
    if not request.valid:
        raise CalculationError("Invalid request")
    return CalculationResult(value=(request.percentage / 100.0) * request.base, request=request)


def parse_request(amount_raw: str, percentage_raw: str) -> CalculationRequest:
    """Turn the two `calc` arguments into a request, mirroring the CLI rules."""
    if "%" in percentage_raw:
        raise InvalidInputError(
            "Invalid percentage. Please provide a whole number without the % symbol.",
            field="percentage",
            value=percentage_raw,
        )
    try:
        percentage = int(percentage_raw.strip())
    except ValueError:
        raise InvalidInputError(
            "Invalid percentage. Please provide a whole number.",
            field="percentage",
            value=percentage_raw,
        ) from None
    if percentage < 0:
        raise InvalidInputError("Percentage cannot be negative", field="percentage", value=percentage_raw)
    try:
        base = float(amount_raw.strip())
    except ValueError:
        raise InvalidInputError(
            "Invalid amount. Please provide a numeric value.", field="amount", value=amount_raw
        ) from None
    if not math.isfinite(base):
        raise CalculationError("Amount must be a finite number")
    return CalculationRequest(percentage=percentage, base=base)


def percent_of(base: Any, percentage: Any) -> str:
    """Convenience wrapper used by the LLM tool; LLMs often send 20.0 for 20."""
    request = CalculationRequest(percentage=int(float(percentage)), base=float(base))
    return calculate(request).formatted_value
