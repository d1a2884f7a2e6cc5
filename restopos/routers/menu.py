from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from restopos.deps import get_services, require_owner, require_staff
from restopos.schemas.entities import AppUser, MenuItem
from restopos.services.container import Services

router = APIRouter(prefix="/api/menu", tags=["menu"])


class MenuItemOut(BaseModel):
    id: str
    name: str
    price: float
    category: str
    active: bool


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    category: str = Field("food", description="food, drink or package")
    active: bool = True


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    category: Optional[str] = None
    active: Optional[bool] = None


class MenuItemActive(BaseModel):
    active: bool


def _menu_item_to_dict(item: MenuItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "price": item.price,
        "category": item.category,
        "active": item.active,
    }


@router.get("", response_model=List[MenuItemOut])
def list_menu_items(
    category: Optional[Literal["food", "drink", "package"]] = Query(None),
    active_only: bool = Query(False),
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    items = services.menu.list_items(category=category, active_only=active_only)
    return [_menu_item_to_dict(item) for item in items]


@router.post("", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    payload: MenuItemCreate,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    item = services.menu.create_item(payload.name, payload.price, payload.category, payload.active)
    return _menu_item_to_dict(item)


@router.post("/seed", response_model=List[MenuItemOut])
def seed_menu(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return [_menu_item_to_dict(item) for item in services.menu.seed_demo_menu()]


@router.put("/{item_id}", response_model=MenuItemOut)
def update_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    item = services.menu.update_item(
        item_id,
        name=payload.name,
        price=payload.price,
        category=payload.category,
        active=payload.active,
    )
    return _menu_item_to_dict(item)


@router.patch("/{item_id}/active", response_model=MenuItemOut)
def toggle_menu_item(
    item_id: str,
    payload: MenuItemActive,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return _menu_item_to_dict(services.menu.set_active(item_id, payload.active))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    item_id: str,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    services.menu.delete_item(item_id)
