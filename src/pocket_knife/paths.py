import os

from .logging import get_logger

log = get_logger("paths")

DEFAULT_STORAGE_FOLDER = ".pocket-knife"
DEFAULT_DB_FILENAME = "products.db"


def expand_abs(path: str) -> str:
    """Expand env vars and ~ then return absolute path."""
    return os.path.abspath(os.path.expanduser(os.path.expandvars(path or "")))


def storage_dir() -> str:
    """Return the per-user storage directory.

    POCKET_KNIFE_HOME overrides the default `~/.pocket-knife`. The directory
    is not created here; the database creates it on first use.
    """
    override = os.environ.get("POCKET_KNIFE_HOME")
    if override and override.strip():
        return expand_abs(override.strip())
    return expand_abs(os.path.join("~", DEFAULT_STORAGE_FOLDER))


def default_db_path() -> str:
    path = os.path.join(storage_dir(), DEFAULT_DB_FILENAME)
    log.debug(f"Product DB path: {path}")
    return path
