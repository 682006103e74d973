"""Product catalog backed by SQLite.

Modules:
- validation: name/price/range checks shared by the store and query tools
- models: the Product record and price formatting
- db: DB location, lazy connection, schema
- store: create/find/list/update/delete/filter/count

Submodules import `sqlite3` at load time; call `storage_available()` before
importing them from code that must report a missing driver cleanly.
"""

from importlib import import_module


def storage_available() -> bool:
    """Return True when the sqlite3 driver can be loaded."""
    try:
        import_module("sqlite3")
    except ImportError:
        return False
    return True


__all__ = ["storage_available"]
