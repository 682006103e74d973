"""Tool adapters exposed to the language model.

Invariants:
    - Every tool method returns text and never raises; invalid input becomes
      "Error: <reason>", backend failures become a "Database error" line.
    - Tool name -> method mapping is explicit in `handlers()`.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Sequence

from ..calculator import percent_of
from ..errors import InvalidInputError, PocketKnifeError
from ..logging import get_logger
from ..productdb.models import Product, format_price
from ..productdb.validation import validate_bound, validate_name

LOG = get_logger("assistant-tools")

ToolHandler = Callable[..., str]


def _function_spec(name: str, description: str, properties: Dict[str, Any], required: Sequence[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": list(required),
            },
        },
    }


def _number(desc: str) -> Dict[str, str]:
    return {"type": "number", "description": desc}


class PercentageCalculatorTool:
    def definitions(self) -> List[Dict[str, Any]]:
        return [
            _function_spec(
                "calculate_percentage",
                "Calculate what percentage of a number equals. "
                "For example, to find 20% of 100, use base=100 and percentage=20.",
                {
                    "base": _number("The base amount to calculate from (e.g., 100)"),
                    "percentage": _number("The percentage as a whole number (e.g., 20 for 20%)"),
                },
                ["base", "percentage"],
            )
        ]

    def handlers(self) -> Dict[str, ToolHandler]:
        return {"calculate_percentage": self.calculate_percentage}

    def calculate_percentage(self, base: Any = None, percentage: Any = None) -> str:
        try:
            return percent_of(base, percentage)
        except (TypeError, ValueError, OverflowError):
            return "Error: base and percentage must be numeric values"
        except PocketKnifeError as e:
            return f"Error: {e}"


class ProductQueryTool:
    """Read-only product queries phrased for a chat model."""

    def __init__(self, store: Any) -> None:
        self.store = store

    def definitions(self) -> List[Dict[str, Any]]:
        return [
            _function_spec(
                "find_product_by_name",
                "Look up a single product by name (case-insensitive).",
                {"name": {"type": "string", "description": "Product name, e.g. Banana"}},
                ["name"],
            ),
            _function_spec("list_all_products", "List every stored product with its price.", {}, []),
            _function_spec(
                "filter_products_by_max_price",
                "List products priced at or below a maximum price.",
                {"max_price": _number("Maximum price, inclusive")},
                ["max_price"],
            ),
            _function_spec(
                "filter_products_by_price_range",
                "List products priced between a minimum and a maximum price, inclusive.",
                {
                    "min_price": _number("Minimum price, inclusive"),
                    "max_price": _number("Maximum price, inclusive"),
                },
                ["min_price", "max_price"],
            ),
        ]

    def handlers(self) -> Dict[str, ToolHandler]:
        return {
            "find_product_by_name": self.find_product_by_name,
            "list_all_products": self.list_all_products,
            "filter_products_by_max_price": self.filter_products_by_max_price,
            "filter_products_by_price_range": self.filter_products_by_price_range,
        }

    @staticmethod
    def _database_error(exc: Exception) -> str:
        LOG.warning("Product query failed: %s", exc, exc_info=True)
        return f"Database error occurred. Please try again. ({type(exc).__name__})"

    @staticmethod
    def _format_list(products: Sequence[Product], header: str) -> str:
        lines = [header]
        for index, product in enumerate(products, start=1):
            lines.append(f"{index}. {product.name} - {product.formatted_price}")
        return "\n".join(lines)

    def find_product_by_name(self, name: Any = None) -> str:
        try:
            try:
                clean = validate_name(name)
            except InvalidInputError:
                raise InvalidInputError("name must be a non-empty string", field="name", value=name) from None
            product = self.store.find_by_name(clean)
            if product is None:
                return f"No product found with name '{name}'. Use 'list all products' to see available products."
            return f"Product found: {product.name} - {product.formatted_price}"
        except InvalidInputError as e:
            return f"Error: {e}"
        except Exception as e:
            return self._database_error(e)

    def list_all_products(self) -> str:
        try:
            products = self.store.all()
            if not products:
                return 'No products stored yet. Use "store-product" command to add products.'
            return self._format_list(products, f"All products ({len(products)} total)")
        except Exception as e:
            return self._database_error(e)

    def filter_products_by_max_price(self, max_price: Any = None) -> str:
        try:
            ceiling = validate_bound(max_price, "max_price")
            products = self.store.filter_by_max_price(ceiling)
            limit = format_price(ceiling)
            if not products:
                return (
                    f"No products found under {limit}. "
                    "Try a higher price or use 'list all products' to see what's available."
                )
            return self._format_list(products, f"Found {len(products)} product(s) under {limit}")
        except InvalidInputError as e:
            return f"Error: {e}"
        except Exception as e:
            return self._database_error(e)

    def filter_products_by_price_range(self, min_price: Any = None, max_price: Any = None) -> str:
        try:
            low = validate_bound(min_price, "min_price")
            high = validate_bound(max_price, "max_price")
            if low > high:
                return (
                    f"Error: Minimum price ({format_price(low)}) cannot be greater than "
                    f"maximum price ({format_price(high)})."
                )
            products = self.store.filter_by_price_range(low, high)
            span = f"between {format_price(low)} and {format_price(high)}"
            if not products:
                return (
                    f"No products found {span}. "
                    "Try expanding the range or use 'list all products' to see what's available."
                )
            return self._format_list(products, f"Found {len(products)} product(s) {span}")
        except InvalidInputError as e:
            return f"Error: {e}"
        except Exception as e:
            return self._database_error(e)


def dispatch(handlers: Dict[str, ToolHandler], name: str, arguments: str) -> str:
    """Run one tool call; unknown tools and malformed arguments come back as text."""
    handler = handlers.get(name)
    if handler is None:
        return f"Error: unknown tool '{name}'"
    try:
        kwargs = json.loads(arguments or "{}")
    except json.JSONDecodeError:
        return f"Error: arguments for '{name}' are not valid JSON"
    if not isinstance(kwargs, dict):
        return f"Error: arguments for '{name}' must be an object"
    try:
        return handler(**kwargs)
    except TypeError as e:
        return f"Error: {e}"
