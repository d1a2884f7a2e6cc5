from __future__ import annotations

import logging
from typing import Iterable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from restopos.core.errors import NotFoundError
from restopos.core.request_context import set_request_context
from restopos.schemas.entities import AppUser
from restopos.services.auth import decode_access_token
from restopos.services.container import Services

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

logger = logging.getLogger(__name__)


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Services not ready")
    return services


def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    services: Services = Depends(get_services),
) -> AppUser:
    """Read the bearer token and load the user it belongs to."""
    try:
        payload = decode_access_token(token)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token (no subject)",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = services.users.get_user(str(user_id))
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.user = user
    set_request_context(user_id=user.id)
    return user


def _normalize_role(role: str | None) -> str:
    return (role or "").strip().lower()


def require_role(roles: Iterable[str]):
    allowed = {_normalize_role(role) for role in roles}

    def _dependency(
        request: Request,
        user: AppUser = Depends(get_current_user),
    ) -> AppUser:
        if _normalize_role(user.role) not in allowed:
            logger.warning(
                "Access denied (role_denied): user_id=%s user_role=%s endpoint=%s",
                user.id,
                user.role,
                f"{request.method} {request.url.path}",
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _dependency


require_staff = require_role(["owner", "staff"])
require_owner = require_role(["owner"])
