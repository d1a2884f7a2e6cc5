from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from restopos.core.errors import ValidationError
from restopos.deps import get_services, require_owner, require_staff
from restopos.schemas.entities import AppUser, TransactionRecord
from restopos.services.container import Services

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


class OrderLineIn(BaseModel):
    menu_item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class TransactionCreate(BaseModel):
    kind: Literal["dine_in", "takeaway"] = "dine_in"
    table_number: Optional[int] = Field(None, gt=0)
    customer_name: str = Field(..., min_length=1)
    items: List[OrderLineIn] = Field(..., min_length=1)
    # Accepted for compatibility with older clients; the stored total is recomputed
    total_amount: Optional[float] = None


class PaymentMethodIn(BaseModel):
    payment_method: Optional[Literal["cash", "qris", "transfer"]] = None


class StatusIn(BaseModel):
    status: Literal["pending", "paid"]


def transaction_to_dict(record: TransactionRecord) -> dict:
    return {
        "id": record.id,
        "kind": record.kind,
        "table_number": record.table_number,
        "customer_name": record.customer_name,
        "items": [
            {
                "menu_item_id": line.menu_item.id,
                "name": line.menu_item.name,
                "price": line.menu_item.price,
                "quantity": line.quantity,
                "subtotal": round(line.subtotal, 2),
            }
            for line in record.items
        ],
        "total_amount": record.total_amount,
        "timestamp": record.timestamp.isoformat(),
        "status": record.status,
        "payment_method": record.payment_method,
        "operator_role": record.operator_role,
    }


@router.get("")
def list_transactions(
    status_filter: Optional[Literal["pending", "paid"]] = Query(None, alias="status"),
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    return [transaction_to_dict(record) for record in services.transactions.list_transactions(status_filter)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    services: Services = Depends(get_services),
    user: AppUser = Depends(require_staff),
):
    lines = [line.model_dump() for line in payload.items]
    if payload.kind == "takeaway":
        record = services.transactions.create_takeaway(payload.customer_name, lines, operator_role=user.role)
    else:
        if payload.table_number is None:
            raise ValidationError("table_number is required for dine-in orders")
        record = services.transactions.create_dine_in(
            payload.table_number,
            payload.customer_name,
            lines,
            operator_role=user.role,
        )
    return transaction_to_dict(record)


@router.put("/{transaction_id}/payment-method")
def set_payment_method(
    transaction_id: str,
    payload: PaymentMethodIn,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    record = services.transactions.set_payment_method(transaction_id, payload.payment_method)
    return transaction_to_dict(record)


@router.put("/{transaction_id}/status")
def set_status(
    transaction_id: str,
    payload: StatusIn,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_staff),
):
    return transaction_to_dict(services.transactions.set_status(transaction_id, payload.status))


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: str,
    services: Services = Depends(get_services),
    _user: AppUser = Depends(require_owner),
):
    services.transactions.delete_transaction(transaction_id)
