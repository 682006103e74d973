from __future__ import annotations

import sys
from typing import Any, Callable, Optional, TextIO

from ..errors import (
    DuplicateProductError,
    InvalidInputError,
    ProductNotFoundError,
)
from ..logging import get_logger

LOG = get_logger("cli-products")

Confirm = Callable[[str], bool]

_AFFIRMATIVE = {"y", "yes"}


def stdin_confirm(prompt: str) -> bool:
    """Ask a yes/no question on stdin; end of input counts as "no"."""
    try:
        answer = input(prompt)
    except EOFError:
        print()
        return False
    return answer.strip().lower() in _AFFIRMATIVE


def write_error(err: TextIO, *messages: str) -> None:
    """Print `Error: <first>` followed by indented follow-up lines."""
    print(f"\nError: {messages[0]}", file=err)
    for line in messages[1:]:
        print(f"  {line}" if line else "", file=err)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ProductCommands:
    """Product verbs of the CLI; each method returns the process exit code."""

    def __init__(
        self,
        store: Any,
        *,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        confirm: Optional[Confirm] = None,
    ) -> None:
        self.store = store
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.confirm = confirm or stdin_confirm

    def _print(self, line: str = "") -> None:
        print(line, file=self.out)

    def _usage(self, problem: str, usage: str, *examples: str) -> int:
        write_error(self.err, problem, f"Usage: pocket-knife {usage}", "", "Examples:", *(f"  {e}" for e in examples))
        return 1

    def _unexpected(self, action: str, exc: Exception) -> int:
        LOG.debug("Unexpected failure while %s", action, exc_info=True)
        write_error(self.err, f"An unexpected error occurred while {action}", f"Details: {exc}")
        return 1

    def store_product(self, name: Optional[str], price: Optional[str]) -> int:
        examples = ('pocket-knife store-product "Coffee" 12.99', 'pocket-knife store-product "Milk" 3.50')
        if _blank(name):
            return self._usage("Missing product name", 'store-product "<name>" <price>', *examples)
        if _blank(price):
            return self._usage("Missing price argument", 'store-product "<name>" <price>', *examples)
        try:
            product = self.store.create(name, price)
        except InvalidInputError as e:
            write_error(self.err, str(e), f"Received {e.field}: {e.value!r}")
            return 2
        except DuplicateProductError as e:
            write_error(self.err, str(e), "Use a different name or update the existing product.")
            return 1
        except Exception as e:
            return self._unexpected("storing the product", e)

        self._print()
        self._print("✓ Product stored successfully")
        self._print(f"  Name:  {product.name}")
        self._print(f"  Price: {product.formatted_price}")
        self._print(f"  ID:    {product.id}")
        self._print()
        return 0

    def list_products(self) -> int:
        try:
            products = self.store.all()
        except Exception as e:
            return self._unexpected("listing products", e)
        if not products:
            self._print("No products stored yet.")
            return 0
        self._print("ID   Name                 Price")
        self._print("--   ----                 -----")
        for product in products:
            self._print(f"{product.id:<4} {product.name:<20} {product.formatted_price}")
        return 0

    def get_product(self, name: Optional[str]) -> int:
        if _blank(name):
            return self._usage(
                "Product name required",
                'get-product "<name>"',
                'pocket-knife get-product "Coffee"',
                'pocket-knife get-product "Laptop"',
            )
        try:
            product = self.store.find_by_name(name)
        except Exception as e:
            return self._unexpected("retrieving the product", e)
        if product is None:
            write_error(self.err, str(ProductNotFoundError(name)), "See stored products with: pocket-knife list-products")
            return 1
        self._print(f"Product: {product.name}")
        self._print(f"Price: {product.formatted_price}")
        self._print(f"ID: {product.id}")
        self._print(f"Created: {product.created_at}")
        return 0

    def update_product(self, name: Optional[str], new_price: Optional[str]) -> int:
        examples = ('pocket-knife update-product "Coffee" 15.99', 'pocket-knife update-product "Laptop" 899.00')
        if _blank(name):
            return self._usage("Product name required", 'update-product "<name>" <new_price>', *examples)
        if _blank(new_price):
            return self._usage("New price required", 'update-product "<name>" <new_price>', *examples)
        try:
            current = self.store.find_by_name(name)
            if current is None:
                raise ProductNotFoundError(name)
            old_price = current.formatted_price
            updated = self.store.update_price(name, new_price)
        except ProductNotFoundError as e:
            write_error(self.err, str(e), "See stored products with: pocket-knife list-products")
            return 1
        except InvalidInputError as e:
            write_error(self.err, str(e), f"Received {e.field}: {e.value!r}")
            return 2
        except Exception as e:
            return self._unexpected("updating the product", e)

        self._print("✓ Product price updated")
        self._print(f"  Product:   {updated.name}")
        self._print(f"  Old Price: {old_price}")
        self._print(f"  New Price: {updated.formatted_price}")
        return 0

    def delete_product(self, name: Optional[str]) -> int:
        if _blank(name):
            return self._usage(
                "Product name required",
                'delete-product "<name>"',
                'pocket-knife delete-product "Coffee"',
                'pocket-knife delete-product "Laptop"',
            )
        try:
            product = self.store.find_by_name(name)
            if product is None:
                raise ProductNotFoundError(name)
            self._print(f"Delete product '{product.name}' ({product.formatted_price})?")
            self.out.flush()
            if not self.confirm("Are you sure? (y/n): "):
                self._print("Deletion cancelled")
                return 0
            removed = self.store.delete(product.name)
        except ProductNotFoundError as e:
            write_error(self.err, str(e), "See stored products with: pocket-knife list-products")
            return 1
        except Exception as e:
            return self._unexpected("deleting the product", e)

        self._print("✓ Product deleted successfully")
        self._print(f"  Name:  {removed.name}")
        self._print(f"  Price: {removed.formatted_price}")
        return 0
