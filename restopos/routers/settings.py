from __future__ import annotations

from fastapi import APIRouter, Depends

from restopos.deps import get_services, require_owner
from restopos.schemas.entities import AppUser
from restopos.schemas.settings import ConnectionSettings
from restopos.services.container import Services

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/connection", response_model=ConnectionSettings)
def get_connection_settings(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return services.settings.load_connection_settings()


@router.put("/connection", response_model=ConnectionSettings)
def update_connection_settings(
    body: ConnectionSettings,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return services.settings.save_connection_settings(body)
