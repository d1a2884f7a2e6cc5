from __future__ import annotations

from restopos.repositories.base import CollectionRepository
from restopos.schemas.entities import MenuItem


class MenuRepository(CollectionRepository[MenuItem]):
    key = "menu_items"
    model = MenuItem
    label = "menu item"
