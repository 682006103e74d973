from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Mapping

CURRENCY_SYMBOL = "$"
_CENT = Decimal("0.01")
# Enough significant digits for the largest finite float plus cents.
_PRICE_PRECISION = 400


def format_price(value: Any) -> str:
    """Render a price as `$x.xx`, rounding half-up at the second decimal.

    Goes through the shortest float repr so 12.995 rounds to 13.00 instead
    of following its binary expansion down to 12.99.
    """
    with localcontext() as ctx:
        ctx.prec = _PRICE_PRECISION
        amount = Decimal(repr(float(value))).quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{CURRENCY_SYMBOL}{amount}"


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: float
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Product":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            price=float(row["price"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @property
    def formatted_price(self) -> str:
        return format_price(self.price)
