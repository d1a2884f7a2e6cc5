from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from restopos.deps import get_current_user, get_services
from restopos.schemas.entities import AppUser
from restopos.services.auth import create_access_token
from restopos.services.container import Services

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginPayload(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    id: str
    name: str
    username: str
    role: str
    created_at: str


def user_to_dict(user: AppUser) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "username": user.username,
        "role": user.role,
        "created_at": user.created_at.isoformat(),
    }


@router.post("/login")
def login(payload: LoginPayload, services: Services = Depends(get_services)):
    user = services.users.authenticate(payload.username, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_access_token(user.id, extra={"role": user.role})
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": user_to_dict(user),
    }


@router.get("/me", response_model=UserOut)
def me(user: AppUser = Depends(get_current_user)):
    return user_to_dict(user)
