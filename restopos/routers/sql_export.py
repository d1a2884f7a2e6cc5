from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from restopos.deps import get_services, require_owner
from restopos.schemas.entities import AppUser
from restopos.services.container import Services

router = APIRouter(prefix="/api/sql", tags=["sql"])


@router.get("/schema", response_class=PlainTextResponse)
def sql_schema(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return services.sql_export.generate_create_table_sql()


@router.get("/inserts", response_class=PlainTextResponse)
def sql_inserts(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return services.sql_export.generate_insert_sql()


@router.get("/export", response_class=PlainTextResponse)
def sql_export(
    include_schema: bool = Query(True),
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return services.sql_export.export_sql(include_schema)


@router.get("/psql", response_class=PlainTextResponse)
def psql_script(
    connection_string: Optional[str] = Query(None),
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    # Falls back to the saved Neon connection string
    if not connection_string:
        connection_string = services.settings.load_connection_settings().neon_connection_string
    return services.sql_export.export_psql_script(connection_string)
