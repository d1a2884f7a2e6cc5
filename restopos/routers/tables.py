from __future__ import annotations

from datetime import date, time
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from restopos.deps import get_services, require_owner, require_staff
from restopos.schemas.entities import AppUser, DiningTable
from restopos.services.container import Services

router = APIRouter(prefix="/api/tables", tags=["tables"])


class TableOut(BaseModel):
    id: str
    number: int
    capacity: int
    status: str
    customer_name: Optional[str] = None
    occupied_since: Optional[str] = None
    reservation_date: Optional[date] = None
    reservation_time: Optional[time] = None
    reservation_people: Optional[int] = None


class TableCreate(BaseModel):
    capacity: int = Field(..., gt=0)
    number: Optional[int] = Field(None, gt=0)


class TableCapacity(BaseModel):
    capacity: int = Field(..., gt=0)


class ReservationIn(BaseModel):
    customer_name: str = Field(..., min_length=1)
    reservation_date: str = Field(..., min_length=1, description="dd/mm/yyyy or YYYY-MM-DD")
    reservation_time: str = Field(..., min_length=1, description="HH:MM")
    people: int = Field(..., gt=0)


class OccupyIn(BaseModel):
    customer_name: Optional[str] = None


def _table_to_dict(table: DiningTable) -> dict:
    return {
        "id": table.id,
        "number": table.number,
        "capacity": table.capacity,
        "status": table.status,
        "customer_name": table.customer_name,
        "occupied_since": table.occupied_since.isoformat() if table.occupied_since else None,
        "reservation_date": table.reservation_date,
        "reservation_time": table.reservation_time,
        "reservation_people": table.reservation_people,
    }


@router.get("", response_model=List[TableOut])
def list_tables(
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    return [_table_to_dict(table) for table in services.tables.list_tables()]


@router.post("", response_model=TableOut, status_code=status.HTTP_201_CREATED)
def create_table(
    payload: TableCreate,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return _table_to_dict(services.tables.add_table(payload.capacity, payload.number))


@router.put("/{number}", response_model=TableOut)
def update_capacity(
    number: int,
    payload: TableCapacity,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    return _table_to_dict(services.tables.change_capacity(number, payload.capacity))


@router.delete("/{number}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(
    number: int,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    services.tables.remove_table(number)


@router.post("/{number}/reserve", response_model=TableOut)
def reserve_table(
    number: int,
    payload: ReservationIn,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    table = services.tables.reserve(
        number,
        customer_name=payload.customer_name,
        reservation_date=payload.reservation_date,
        reservation_time=payload.reservation_time,
        people=payload.people,
    )
    return _table_to_dict(table)


@router.post("/{number}/cancel-reservation", response_model=TableOut)
def cancel_reservation(
    number: int,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    return _table_to_dict(services.tables.cancel_reservation(number))


@router.post("/{number}/occupy", response_model=TableOut)
def occupy_table(
    number: int,
    payload: OccupyIn,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    return _table_to_dict(services.tables.occupy(number, payload.customer_name))


@router.post("/{number}/finish", response_model=TableOut)
def finish_table(
    number: int,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    return _table_to_dict(services.tables.finish(number))
