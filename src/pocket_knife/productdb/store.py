from __future__ import annotations

import sqlite3
from typing import Any, List, Optional

from ..errors import DuplicateProductError, ProductNotFoundError
from ..logging import get_logger
from .db import ProductDatabase
from .models import Product
from .validation import validate_bound, validate_name, validate_price, validate_range


LOG = get_logger("productdb-store")

_COLUMNS = "id, name, price, created_at, updated_at"
# Names are unique case-insensitively, so a binary sort on name is total.
_BY_NAME = "ORDER BY name COLLATE BINARY ASC"
_BY_PRICE = "ORDER BY price ASC, name COLLATE BINARY ASC"


class ProductStore:
    """Single writer for the products table.

    Every lookup compares names with `COLLATE NOCASE`, the same collation the
    unique index uses, so enforcement and reads never disagree.
    """

    def __init__(self, db: Optional[ProductDatabase] = None) -> None:
        self.db = db or ProductDatabase()

    @classmethod
    def open(cls, db_path: Optional[str] = None) -> "ProductStore":
        return cls(ProductDatabase(db_path))

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> "ProductStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _select(self, where: str = "", params: tuple = (), order: str = _BY_NAME) -> List[Product]:
        sql = f"SELECT {_COLUMNS} FROM products {where} {order};"
        rows = self.db.connection.execute(sql, params).fetchall()
        return [Product.from_row(r) for r in rows]

    def create(self, name: Any, price: Any) -> Product:
        clean_name = validate_name(name)
        clean_price = validate_price(price)
        conn = self.db.connection
        try:
            with conn:
                cur = conn.execute(
                    "INSERT INTO products (name, price) VALUES (?, ?);",
                    (clean_name, clean_price),
                )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e).upper():
                LOG.info(f"Rejected duplicate product name: {clean_name!r}")
                raise DuplicateProductError(clean_name) from e
            raise
        product = self._select("WHERE id = ?", (cur.lastrowid,))[0]
        LOG.info(f"Stored product id={product.id} name={product.name!r} price={product.price}")
        return product

    def find_by_name(self, name: Any) -> Optional[Product]:
        if not isinstance(name, str) or not name.strip():
            return None
        found = self._select("WHERE name = ? COLLATE NOCASE", (name.strip(),))
        return found[0] if found else None

    def exists(self, name: Any) -> bool:
        return self.find_by_name(name) is not None

    def all(self) -> List[Product]:
        return self._select()

    def update_price(self, name: Any, new_price: Any) -> Product:
        clean_price = validate_price(new_price)
        key = name.strip() if isinstance(name, str) else ""
        conn = self.db.connection
        with conn:
            cur = conn.execute(
                "UPDATE products SET price = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE name = ? COLLATE NOCASE;",
                (clean_price, key),
            )
        if cur.rowcount == 0:
            raise ProductNotFoundError(key or str(name))
        product = self.find_by_name(key)
        if product is None:
            # Removed by another process between the UPDATE and this read.
            raise ProductNotFoundError(key)
        LOG.info(f"Updated price of {product.name!r} to {product.price}")
        return product

    def delete(self, name: Any) -> Product:
        """Remove a product and return it as it was just before removal."""
        key = name.strip() if isinstance(name, str) else ""
        conn = self.db.connection
        with conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM products WHERE name = ? COLLATE NOCASE;", (key,)
            ).fetchone()
            if row is None:
                raise ProductNotFoundError(key or str(name))
            snapshot = Product.from_row(row)
            conn.execute("DELETE FROM products WHERE id = ?;", (snapshot.id,))
        LOG.info(f"Deleted product id={snapshot.id} name={snapshot.name!r}")
        return snapshot

    def filter_by_max_price(self, max_price: Any) -> List[Product]:
        ceiling = validate_bound(max_price, "max_price")
        return self._select("WHERE price <= ?", (ceiling,), order=_BY_PRICE)

    def filter_by_price_range(self, min_price: Any, max_price: Any) -> List[Product]:
        low, high = validate_range(min_price, max_price)
        return self._select("WHERE price BETWEEN ? AND ?", (low, high), order=_BY_PRICE)

    def count(self) -> int:
        row = self.db.connection.execute("SELECT COUNT(*) AS n FROM products;").fetchone()
        return int(row["n"])
