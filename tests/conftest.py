"""Shared fixtures: reference data and an isolated key-value store."""

from __future__ import annotations

from pathlib import Path

import pytest

from hiragana_match.core.catalog import HiraganaCatalog
from hiragana_match.core.levels import LevelRepository
from hiragana_match.core.storage import KeyValueStore


@pytest.fixture(scope="session")
def catalog() -> HiraganaCatalog:
    return HiraganaCatalog()


@pytest.fixture(scope="session")
def levels(catalog: HiraganaCatalog) -> LevelRepository:
    return LevelRepository(catalog)


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "store.json"


@pytest.fixture()
def store(store_path: Path) -> KeyValueStore:
    """KeyValueStore backed by a temp file so tests don't touch ~/.hiragana_match."""
    return KeyValueStore(store_path)


@pytest.fixture(autouse=True)
def _no_unlock_all(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HIRAGANA_MATCH_UNLOCK_ALL", raising=False)


class FakeClock:
    """Manually advanced clock for timing rounds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
