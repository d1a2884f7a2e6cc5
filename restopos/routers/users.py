from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from restopos.deps import get_services, require_owner
from restopos.routers.auth import UserOut, user_to_dict
from restopos.schemas.entities import AppUser
from restopos.services.container import Services

router = APIRouter(prefix="/api/users", tags=["users"])


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    role: Literal["owner", "staff"] = "staff"


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    username: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[Literal["owner", "staff"]] = None


@router.get("", response_model=List[UserOut])
def list_users(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return [user_to_dict(entry) for entry in services.users.list_users()]


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    user = services.users.create_user(payload.name, payload.username, payload.password, payload.role)
    return user_to_dict(user)


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    payload: UserUpdate,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    user = services.users.update_user(
        user_id,
        name=payload.name,
        username=payload.username,
        password=payload.password,
        role=payload.role,
    )
    return user_to_dict(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    services.users.delete_user(user_id)
