from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from restopos.core.errors import ValidationError
from restopos.deps import get_services, require_owner
from restopos.schemas.entities import AppUser
from restopos.services.container import Services

router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.get("/export")
def export_backup(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    filename = f"backup-{datetime.now(timezone.utc).date().isoformat()}.json"
    return Response(
        content=services.backup.export_backup_json(),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/import")
def import_backup(
    file: UploadFile = File(...),
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    raw = file.file.read()
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationError("Backup file must be UTF-8 text") from exc
    return services.backup.import_backup_json(content)
