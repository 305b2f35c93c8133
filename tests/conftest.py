"""Shared fixtures: every test gets its own empty data directory."""
import pytest

from taskcal.calendar.store import reset_memory_store
from taskcal.storage.store import reset_store
import taskcal.routes.health


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Point DATA_DIR at a fresh temp dir and drop cached singletons."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("EVENT_STORE", raising=False)
    monkeypatch.delenv("LAYOUT_STRATEGY", raising=False)
    reset_store()
    reset_memory_store()
    taskcal.routes.health._last_sync = None
    yield tmp_path
    reset_store()
    reset_memory_store()
