import threading
import time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from restopos.core.errors import NotFoundError, ValidationError
from restopos.repositories.menu import MenuRepository
from restopos.repositories.tables import TableRepository, ensure_unique_number
from restopos.repositories.transactions import TransactionRepository
from restopos.schemas.entities import DiningTable, MenuItem, build_record
from restopos.services.kv_store import KeyValueStore


def _build_store() -> KeyValueStore:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return KeyValueStore(engine)


def _table(number: int, capacity: int = 4, **extra) -> DiningTable:
    return build_record(DiningTable, {"number": number, "capacity": capacity, **extra})


def test_save_then_load_round_trips_in_insertion_order():
    repo = TableRepository(_build_store())
    tables = [_table(5), _table(1, 2), _table(3, 6, status="reserved", customer_name="Sari")]

    repo.save(tables)

    assert repo.load() == tables
    assert [table.number for table in repo.load()] == [5, 1, 3]


def test_load_returns_empty_list_when_key_missing_or_not_a_list():
    store = _build_store()
    repo = TableRepository(store)

    assert repo.load() == []

    store.set("tables", {"unexpected": True})
    assert repo.load() == []


def test_save_rejects_duplicate_ids():
    repo = TableRepository(_build_store())
    first = _table(1)
    clone = first.model_copy(update={"number": 2})

    with pytest.raises(ValidationError):
        repo.save([first, clone])


def test_interleaved_upserts_keep_both_records(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'store.db'}",
        connect_args={"check_same_thread": False},
    )
    store = KeyValueStore(engine)
    first_read = threading.Event()
    errors: list[Exception] = []

    def _slow_check(_records, _candidate):
        first_read.set()
        time.sleep(0.3)

    def _first_writer():
        try:
            MenuRepository(store).upsert(
                build_record(MenuItem, {"name": "Ayam Bakar", "price": 35000}),
                check=_slow_check,
            )
        except Exception as exc:
            errors.append(exc)

    worker = threading.Thread(target=_first_writer)
    worker.start()
    assert first_read.wait(5)
    MenuRepository(store).upsert(build_record(MenuItem, {"name": "Es Jeruk", "price": 10000, "category": "drink"}))
    worker.join(10)

    assert errors == []
    assert sorted(item.name for item in MenuRepository(store).load()) == ["Ayam Bakar", "Es Jeruk"]


def test_upsert_replaces_record_with_same_id():
    repo = TableRepository(_build_store())
    table = _table(1)
    repo.upsert(table)

    repo.upsert(table.model_copy(update={"capacity": 8}))

    assert len(repo.load()) == 1
    assert repo.get(table.id).capacity == 8


def test_upsert_check_aborts_duplicate_table_number():
    repo = TableRepository(_build_store())
    repo.upsert(_table(1), check=ensure_unique_number)

    with pytest.raises(ValidationError):
        repo.upsert(_table(1), check=ensure_unique_number)

    assert len(repo.load()) == 1


def test_mutate_and_delete_raise_not_found_for_unknown_id():
    repo = TableRepository(_build_store())
    repo.upsert(_table(1))

    with pytest.raises(NotFoundError):
        repo.mutate("missing", lambda current: current)
    with pytest.raises(NotFoundError):
        repo.delete("missing")


def test_records_are_stored_with_camel_case_keys_and_without_unset_fields():
    store = _build_store()
    repo = TableRepository(store)

    repo.upsert(_table(2, status="occupied", customer_name="Budi"))

    stored = store.get("tables")[0]
    assert stored["customerName"] == "Budi"
    assert "occupiedSince" not in stored
    assert "reservationDate" not in stored


def test_browser_records_with_legacy_fields_are_accepted():
    store = _build_store()
    store.set(
        "menu_items",
        [{"id": 1714550400000, "name": "Paket 1 Jam", "price": 15000, "category": "paket_mancing", "isActive": False}],
    )
    store.set(
        "transactions",
        [
            {
                "id": "tx1",
                "type": "dine-in",
                "kind": "dine-in",
                "tableNumber": 1,
                "customerName": "Budi",
                "items": [{"menuItem": {"id": 7, "name": "Es Teh", "price": 8000}, "quantity": 2}],
                "totalAmount": 1,
                "timestamp": "2024-05-01T10:00:00Z",
                "status": "pending",
            }
        ],
    )

    item = MenuRepository(store).load()[0]
    record = TransactionRepository(store).load()[0]

    assert item.id == "1714550400000"
    assert item.category == "package"
    assert item.active is False
    assert record.kind == "dine_in"
    assert record.total_amount == 16000
