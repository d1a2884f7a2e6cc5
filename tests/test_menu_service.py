import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from restopos.core.errors import NotFoundError, ValidationError
from restopos.repositories.menu import MenuRepository
from restopos.services.kv_store import KeyValueStore
from restopos.services.menu import DEMO_MENU, MenuService


def _build_service() -> tuple[MenuService, KeyValueStore]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = KeyValueStore(engine)
    return MenuService(MenuRepository(store)), store


def test_update_item_accepts_legacy_category_and_keeps_other_fields():
    service, _store = _build_service()
    item = service.create_item("Kopi Tubruk", 12000, "drink")

    updated = service.update_item(item.id, price=13000, category="makanan")

    assert updated.price == 13000
    assert updated.category == "food"
    assert updated.name == "Kopi Tubruk"
    assert service.get_item(item.id) == updated


def test_set_active_filters_listing():
    service, _store = _build_service()
    kopi = service.create_item("Kopi Tubruk", 12000, "drink")
    service.create_item("Es Jeruk", 10000, "minuman")

    service.set_active(kopi.id, False)

    assert [item.name for item in service.list_items(active_only=True)] == ["Es Jeruk"]
    assert len(service.list_items(category="drink")) == 2
    service.set_active(kopi.id, True)
    assert len(service.list_items(active_only=True)) == 2


def test_delete_item_and_missing_ids():
    service, _store = _build_service()
    item = service.create_item("Kopi Tubruk", 12000, "drink")

    service.delete_item(item.id)

    assert service.list_items() == []
    with pytest.raises(NotFoundError):
        service.delete_item(item.id)
    with pytest.raises(NotFoundError):
        service.update_item("missing", price=1)


def test_seed_demo_menu_only_when_empty():
    service, _store = _build_service()

    seeded = service.seed_demo_menu()
    again = service.seed_demo_menu()

    assert len(seeded) == len(DEMO_MENU)
    assert [item.id for item in again] == [item.id for item in seeded]
    assert {item.category for item in seeded} == {"food", "drink", "package"}


def test_seed_is_skipped_when_menu_has_items():
    service, _store = _build_service()
    service.create_item("Kopi Tubruk", 12000, "drink")

    assert [item.name for item in service.seed_demo_menu()] == ["Kopi Tubruk"]


@pytest.mark.parametrize("price", [float("inf"), float("nan"), -1])
def test_invalid_prices_never_reach_the_store(price):
    service, store = _build_service()

    with pytest.raises(ValidationError):
        service.create_item("Kopi", price, "drink")
    with pytest.raises(ValidationError):
        service.create_item("", 1000, "drink")

    assert store.get("menu_items") is None
