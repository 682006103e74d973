from __future__ import annotations

import os
import sqlite3
from typing import Optional

from ..logging import get_logger
from ..paths import default_db_path


LOG = get_logger("productdb-db")


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS products (
  id          INTEGER PRIMARY KEY AUTOINCREMENT,   -- AUTOINCREMENT: ids are never reused
  name        TEXT NOT NULL COLLATE NOCASE CHECK(length(trim(name)) > 0),
  price       REAL NOT NULL CHECK(price >= 0),
  created_at  TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
  updated_at  TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Case-insensitive identity: enforcement and lookup share this index
CREATE UNIQUE INDEX IF NOT EXISTS idx_products_name_nocase ON products(name COLLATE NOCASE);
"""


class ProductDatabase:
    """SQLite connection owner for the product catalog.

    - Places the DB under `~/.pocket-knife/products.db` unless a path is given.
    - Opens one connection lazily and reuses it until `close()`.
    - Ensures schema on first connect.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or default_db_path()
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            folder = os.path.dirname(self.db_path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            self._conn = conn
            LOG.info(f"Product DB opened: {self.db_path}")
            try:
                self._ensure_schema(conn)
            except sqlite3.Error:
                self.close()
                raise
        return self._conn

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        try:
            conn.execute("PRAGMA journal_mode=WAL;")
        except sqlite3.DatabaseError:
            LOG.debug("WAL journal mode not available; keeping default")
        LOG.debug("Ensuring product DB schema is present")
        conn.executescript(SCHEMA_SQL)
        conn.commit()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            LOG.debug("Product DB closed")

    def __enter__(self) -> "ProductDatabase":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
