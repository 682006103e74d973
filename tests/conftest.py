from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from pocket_knife.productdb.store import ProductStore


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep every test away from the real ~/.pocket-knife, API keys and .env files.
    monkeypatch.setenv("POCKET_KNIFE_HOME", str(tmp_path / "home"))
    for name in ("GEMINI_API_KEY", "POCKET_KNIFE_MODEL", "POCKET_KNIFE_LLM_BASE_URL", "POCKET_KNIFE_LLM_TIMEOUT"):
        # setenv first so teardown also drops values a .env file loaded mid-test
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "data" / "products.db")


@pytest.fixture
def store(db_path: str) -> Iterator[ProductStore]:
    with ProductStore.open(db_path) as s:
        yield s
