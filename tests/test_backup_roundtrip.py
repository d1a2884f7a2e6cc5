import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from restopos.core.errors import ValidationError
from restopos.services.container import Services, build_services, seed_demo_data
from tests.fixtures_data import BROWSER_BACKUP


def _build_services() -> Services:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return build_services(engine)


def test_export_then_import_into_fresh_store_reproduces_state():
    source = _build_services()
    seed_demo_data(source)
    source.tables.add_table(4, number=1)
    source.tables.occupy(1, "Budi")
    source.settings.set("neon_host", "ep-demo.neon.tech")

    exported = source.backup.export_backup_json()
    target = _build_services()
    summary = target.backup.import_backup_json(exported)

    assert sorted(summary["restored_keys"]) == ["menu_items", "tables", "transactions", "users"]
    for key in ("tables", "menu_items", "users", "transactions"):
        assert target.store.get(key) == source.store.get(key)
    assert target.settings.snapshot() == source.settings.snapshot()
    assert target.users.authenticate("owner", "admin123") is not None


def test_export_envelope_layout():
    services = _build_services()
    services.settings.set("supabase_url", "https://demo.supabase.co")

    payload = json.loads(services.backup.export_backup_json())

    assert payload["version"] == 1
    assert set(payload["idb"]) == {"tables", "transactions", "menu_items", "users"}
    assert payload["idb"]["tables"] is None
    assert payload["localStorage"]["supabase_url"] == "https://demo.supabase.co"
    assert payload["localStorage"]["neon_host"] is None


def test_browser_backup_is_restored_and_readable():
    services = _build_services()
    services.settings.set("neon_host", "old-host")

    summary = services.backup.import_backup_json(json.dumps(BROWSER_BACKUP))

    assert "neon_host" in summary["settings_removed"]
    assert services.settings.get("neon_host") is None
    assert services.settings.get("supabase_url") == "https://demo.supabase.co"
    tables = services.tables.list_tables()
    assert [table.number for table in tables] == [1, 2]
    assert tables[1].customer_name == "Sari"
    items = services.menu.list_items(active_only=True)
    assert [item.name for item in items] == ["Nasi Gudeg"]
    assert items[0].category == "food"


def test_import_overwrites_existing_keys_outright():
    services = _build_services()
    services.tables.add_table(4, number=9)

    services.backup.import_backup_json(json.dumps(BROWSER_BACKUP))

    assert 9 not in [table.number for table in services.tables.list_tables()]


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", ""])
def test_invalid_backup_content_is_rejected(content):
    services = _build_services()
    services.tables.add_table(4, number=1)

    with pytest.raises(ValidationError):
        services.backup.import_backup_json(content)

    assert len(services.tables.list_tables()) == 1
