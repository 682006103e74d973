from __future__ import annotations

import sqlite3

import pytest

from pocket_knife.assistant.tools import PercentageCalculatorTool, ProductQueryTool, dispatch
from pocket_knife.productdb.models import Product
from pocket_knife.productdb.store import ProductStore


@pytest.fixture
def tool(store: ProductStore) -> ProductQueryTool:
    for name, price in [("Banana", 1.99), ("Apple", 1.5), ("Orange", 2.99), ("Mango", 3.5)]:
        store.create(name, price)
    return ProductQueryTool(store)


class BrokenStore:
    def __getattr__(self, _name: str):
        def _fail(*_a, **_k):
            raise sqlite3.OperationalError("disk I/O error")

        return _fail


def test_find_product_by_name(tool: ProductQueryTool) -> None:
    assert tool.find_product_by_name("banana") == "Product found: Banana - $1.99"
    missing = tool.find_product_by_name("Kiwi")
    assert missing.startswith("No product found with name 'Kiwi'.")
    assert "list all products" in missing


@pytest.mark.parametrize("name", ["", "   ", None, 12])
def test_find_product_by_name_rejects_bad_names(tool: ProductQueryTool, name: object) -> None:
    assert tool.find_product_by_name(name) == "Error: name must be a non-empty string"


def test_list_all_products(tool: ProductQueryTool) -> None:
    assert tool.list_all_products().splitlines() == [
        "All products (4 total)",
        "1. Apple - $1.50",
        "2. Banana - $1.99",
        "3. Mango - $3.50",
        "4. Orange - $2.99",
    ]


def test_list_all_products_empty(store: ProductStore) -> None:
    assert "store-product" in ProductQueryTool(store).list_all_products()


def test_filter_by_max_price(tool: ProductQueryTool) -> None:
    assert tool.filter_products_by_max_price("2.99").splitlines() == [
        "Found 3 product(s) under $2.99",
        "1. Apple - $1.50",
        "2. Banana - $1.99",
        "3. Orange - $2.99",
    ]
    none = tool.filter_products_by_max_price(1)
    assert none.startswith("No products found under $1.00.")
    assert "Try a higher price" in none


@pytest.mark.parametrize("value, fragment", [(-1, "non-negative"), ("cheap", "numeric value"), (None, "numeric value")])
def test_filter_by_max_price_errors(tool: ProductQueryTool, value: object, fragment: str) -> None:
    result = tool.filter_products_by_max_price(value)
    assert result.startswith("Error: max_price")
    assert fragment in result


def test_filter_by_price_range(tool: ProductQueryTool) -> None:
    assert tool.filter_products_by_price_range(1.99, 3).splitlines() == [
        "Found 2 product(s) between $1.99 and $3.00",
        "1. Banana - $1.99",
        "2. Orange - $2.99",
    ]
    assert "Try expanding the range" in tool.filter_products_by_price_range(10, 20)


def test_filter_by_price_range_errors(tool: ProductQueryTool) -> None:
    assert tool.filter_products_by_price_range(5, 2) == (
        "Error: Minimum price ($5.00) cannot be greater than maximum price ($2.00)."
    )
    assert tool.filter_products_by_price_range(-1, 2).startswith("Error: min_price")
    assert tool.filter_products_by_price_range(1, "x").startswith("Error: max_price")


def test_backend_failures_never_raise() -> None:
    tool = ProductQueryTool(BrokenStore())
    expected = "Database error occurred. Please try again. (OperationalError)"
    assert tool.find_product_by_name("Banana") == expected
    assert tool.list_all_products() == expected
    assert tool.filter_products_by_max_price(5) == expected
    assert tool.filter_products_by_price_range(1, 5) == expected


def test_dispatch_routes_and_reports_bad_calls(tool: ProductQueryTool) -> None:
    handlers = tool.handlers()
    assert dispatch(handlers, "find_product_by_name", '{"name": "apple"}') == "Product found: Apple - $1.50"
    assert dispatch(handlers, "list_all_products", "").startswith("All products")
    assert dispatch(handlers, "delete_everything", "{}") == "Error: unknown tool 'delete_everything'"
    assert "not valid JSON" in dispatch(handlers, "list_all_products", "{oops")
    assert dispatch(handlers, "find_product_by_name", '{"nom": "x"}').startswith("Error:")


def test_definitions_match_handlers(tool: ProductQueryTool) -> None:
    names = {d["function"]["name"] for d in tool.definitions()}
    assert names == set(tool.handlers())


def test_percentage_tool() -> None:
    calc = PercentageCalculatorTool()
    assert calc.calculate_percentage(base=100, percentage=20) == "20.00"
    assert calc.calculate_percentage(base="45.50", percentage=20.0) == "9.10"
    assert calc.calculate_percentage(base=100, percentage=-5) == "Error: Invalid request"
    assert calc.calculate_percentage(base="lots", percentage=5).startswith("Error:")


def test_large_prices_format_in_every_query(store: ProductStore) -> None:
    store.create("Yacht", 1e30)
    tool = ProductQueryTool(store)
    big = "$1" + "0" * 30 + ".00"
    assert tool.find_product_by_name("yacht") == f"Product found: Yacht - {big}"
    assert tool.list_all_products().splitlines() == ["All products (1 total)", f"1. Yacht - {big}"]
    assert tool.filter_products_by_max_price(1e31).splitlines()[1] == f"1. Yacht - {big}"
    assert tool.filter_products_by_price_range(0, 1e30).splitlines()[1] == f"1. Yacht - {big}"


class UnformattableStore:
    """Returns a row whose price cannot be rendered."""

    def __init__(self) -> None:
        self.product = Product(id=1, name="Odd", price=float("inf"), created_at="", updated_at="")

    def find_by_name(self, _name):
        return self.product

    def all(self):
        return [self.product]

    def filter_by_max_price(self, _ceiling):
        return [self.product]

    def filter_by_price_range(self, _low, _high):
        return [self.product]


def test_formatting_failures_never_raise() -> None:
    tool = ProductQueryTool(UnformattableStore())
    expected = "Database error occurred. Please try again. (InvalidOperation)"
    assert tool.find_product_by_name("Odd") == expected
    assert tool.list_all_products() == expected
    assert tool.filter_products_by_max_price(5) == expected
    assert tool.filter_products_by_price_range(1, 5) == expected
