"""Shared fixtures for the claim intake tests."""

import pytest

from src.storage import MemoryRecordStore, SQLiteRecordStore


@pytest.fixture
def memory_store():
    return MemoryRecordStore()


@pytest.fixture
def sqlite_store(tmp_path):
    return SQLiteRecordStore(tmp_path / "entries.db")


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each locally runnable backend in turn."""
    if request.param == "memory":
        return MemoryRecordStore()
    return SQLiteRecordStore(tmp_path / "entries.db")
