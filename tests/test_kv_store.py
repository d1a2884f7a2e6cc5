import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from restopos.core.errors import StorageError
from restopos.services.kv_store import KeyValueStore
from restopos.services.settings_store import SettingsStore
from restopos.schemas.settings import ConnectionSettings


def _build_store() -> KeyValueStore:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return KeyValueStore(engine)


def test_get_returns_none_for_missing_key():
    store = _build_store()

    assert store.get("tables") is None


def test_set_overwrites_and_keys_are_sorted():
    store = _build_store()

    store.set("users", [{"id": "a"}])
    store.set("tables", [{"id": "1"}])
    store.set("tables", [{"id": "2"}, {"id": "3"}])

    assert store.get("tables") == [{"id": "2"}, {"id": "3"}]
    assert store.keys() == ["tables", "users"]


def test_delete_removes_key_and_ignores_missing():
    store = _build_store()
    store.set("menu_items", [])

    store.delete("menu_items")
    store.delete("menu_items")

    assert store.get("menu_items") is None


def test_update_passes_current_value_and_stores_result():
    store = _build_store()
    store.set("tables", [1])

    result = store.update("tables", lambda current: (current or []) + [2])

    assert result == [1, 2]
    assert store.get("tables") == [1, 2]


def test_update_aborts_write_when_change_raises():
    store = _build_store()
    store.set("tables", [1])

    def _boom(_current):
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        store.update("tables", _boom)

    assert store.get("tables") == [1]


def test_unreachable_database_raises_storage_error(tmp_path):
    missing_dir = tmp_path / "missing" / "nested"
    store = KeyValueStore(create_engine(f"sqlite:///{missing_dir}/store.db"))

    with pytest.raises(StorageError):
        store.get("tables")


def test_settings_store_saves_and_clears_connection_settings():
    store = _build_store()
    settings = SettingsStore(store)

    settings.save_connection_settings(
        ConnectionSettings(neon_connection_string="postgresql://u:p@h/db", neon_host="h")
    )
    assert settings.get("neon_host") == "h"

    settings.save_connection_settings(ConnectionSettings(neon_connection_string="  ", neon_host="h"))
    loaded = settings.load_connection_settings()

    assert loaded.neon_connection_string is None
    assert loaded.neon_host == "h"
    assert loaded.supabase_url is None


def test_update_on_missing_key_starts_from_none():
    store = _build_store()
    seen = []

    def _append(current):
        seen.append(current)
        return ["first"]

    store.update("transactions", _append)

    assert seen == [None]
    assert store.get("transactions") == ["first"]
