from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from restopos.deps import get_services, require_owner, require_staff
from restopos.schemas.entities import AppUser
from restopos.services.container import Services
from restopos.services.reports import dashboard_stats, summarize, transactions_csv

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/summary")
def report_summary(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return summarize(services.transactions.list_transactions())


@router.get("/dashboard")
def report_dashboard(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    return dashboard_stats(services.tables.list_tables(), services.transactions.list_transactions())


@router.get("/transactions.csv")
def report_csv(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    filename = f"report-{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=transactions_csv(services.transactions.list_transactions()),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
