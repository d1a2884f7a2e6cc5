from __future__ import annotations

import logging
from typing import Optional

from restopos.repositories.menu import MenuRepository
from restopos.schemas.entities import MenuItem, build_record, revise

logger = logging.getLogger(__name__)

DEMO_MENU = [
    {"name": "Nasi Gudeg", "price": 25000, "category": "food"},
    {"name": "Ayam Bakar", "price": 35000, "category": "food"},
    {"name": "Pecel Lele", "price": 20000, "category": "food"},
    {"name": "Ikan Bakar", "price": 45000, "category": "food"},
    {"name": "Es Teh Manis", "price": 8000, "category": "drink"},
    {"name": "Es Jeruk", "price": 10000, "category": "drink"},
    {"name": "Kopi Tubruk", "price": 12000, "category": "drink"},
    {"name": "Paket Mancing 1 Jam", "price": 15000, "category": "package"},
    {"name": "Paket Mancing 3 Jam", "price": 40000, "category": "package"},
]


class MenuService:
    def __init__(self, menu: MenuRepository) -> None:
        self._menu = menu

    def list_items(self, *, category: Optional[str] = None, active_only: bool = False) -> list[MenuItem]:
        items = self._menu.load()
        if category is not None:
            items = [item for item in items if item.category == category]
        if active_only:
            items = [item for item in items if item.active]
        return items

    def get_item(self, item_id: str) -> MenuItem:
        return self._menu.get(item_id)

    def create_item(self, name: str, price: float, category: str, active: bool = True) -> MenuItem:
        item = build_record(
            MenuItem,
            {"name": name, "price": price, "category": category, "active": active},
        )
        self._menu.upsert(item)
        logger.info("Menu item created id=%s name=%s", item.id, item.name)
        return item

    def update_item(
        self,
        item_id: str,
        *,
        name: Optional[str] = None,
        price: Optional[float] = None,
        category: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> MenuItem:
        changes = {
            key: value
            for key, value in {"name": name, "price": price, "category": category, "active": active}.items()
            if value is not None
        }
        return self._menu.mutate(item_id, lambda current: revise(current, **changes))

    def set_active(self, item_id: str, active: bool) -> MenuItem:
        return self._menu.mutate(item_id, lambda current: revise(current, active=active))

    def delete_item(self, item_id: str) -> None:
        self._menu.delete(item_id)

    def seed_demo_menu(self) -> list[MenuItem]:
        """Store the demo menu when no menu exists yet."""
        existing = self._menu.load()
        if existing:
            return existing
        items = [build_record(MenuItem, entry) for entry in DEMO_MENU]
        self._menu.save(items)
        logger.info("Demo menu seeded items=%s", len(items))
        return items
