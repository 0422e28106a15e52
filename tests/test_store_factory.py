"""
Tests for record store selection and startup fallback.
"""

import pytest

from src.intake import BackendUnavailableError
from src.storage import MemoryRecordStore, SQLiteRecordStore, create_record_store
from src.utils.config import Settings


def make_settings(**overrides) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, **overrides)


class TestCreateRecordStore:

    def test_default_is_memory(self):
        store = create_record_store(make_settings())
        assert isinstance(store, MemoryRecordStore)

    def test_sqlite(self, tmp_path):
        store = create_record_store(
            make_settings(storage_backend="sqlite", sqlite_path=tmp_path / "e.db")
        )
        assert isinstance(store, SQLiteRecordStore)
        assert store.db_path == tmp_path / "e.db"

    def test_mongodb_without_uri_uses_memory(self):
        store = create_record_store(make_settings(storage_backend="mongodb", mongodb_uri=None))
        assert isinstance(store, MemoryRecordStore)

    def test_supabase_without_credentials_falls_back(self):
        store = create_record_store(make_settings(
            storage_backend="supabase",
            supabase_url=None,
            supabase_service_role_key=None,
        ))
        assert isinstance(store, MemoryRecordStore)

    def test_fallback_disabled_stops_startup(self):
        with pytest.raises(BackendUnavailableError):
            create_record_store(make_settings(
                storage_backend="supabase",
                supabase_url=None,
                supabase_service_role_key=None,
                storage_fallback_to_memory=False,
            ))

    def test_env_selects_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STORAGE_BACKEND", "sqlite")
        monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "env.db"))
        store = create_record_store(make_settings())
        assert isinstance(store, SQLiteRecordStore)
