"""Records stored under the entity keys of the local store.

Records serialize with camelCase keys and drop unset optional fields, which
is the layout of the browser-era backup files; both camelCase and
snake_case names are accepted on input.
"""

from __future__ import annotations

import math
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from restopos.core.errors import ValidationError

TableStatus = Literal["empty", "occupied", "reserved"]
MenuCategory = Literal["food", "drink", "package"]
TransactionKind = Literal["dine_in", "takeaway"]
TransactionStatus = Literal["pending", "paid"]
PaymentMethod = Literal["cash", "qris", "transfer"]
UserRole = Literal["owner", "staff"]

TABLE_STATUSES = ("empty", "occupied", "reserved")
MENU_CATEGORIES = ("food", "drink", "package")
PAYMENT_METHODS = ("cash", "qris", "transfer")
USER_ROLES = ("owner", "staff")

CATEGORY_ALIASES = {
    "makanan": "food",
    "food": "food",
    "minuman": "drink",
    "drink": "drink",
    "paket": "package",
    "paket_mancing": "package",
    "package": "package",
}
KIND_ALIASES = {
    "dine_in": "dine_in",
    "dine-in": "dine_in",
    "dinein": "dine_in",
    "takeaway": "takeaway",
    "take-away": "takeaway",
    "take_away": "takeaway",
}
PAYMENT_METHOD_ALIASES = {
    "cash": "cash",
    "tunai": "cash",
    "qris": "qris",
    "transfer": "transfer",
    "bank_transfer": "transfer",
}


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_choice(value: Any, aliases: dict[str, str]) -> Any:
    if not isinstance(value, str):
        return value
    lowered = value.strip().lower()
    return aliases.get(lowered, lowered)


class StoredRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Browser-era ids were often numeric timestamps
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DiningTable(StoredRecord):
    number: int = Field(..., gt=0)
    capacity: int = Field(..., gt=0)
    status: TableStatus = "empty"
    customer_name: Optional[str] = None
    occupied_since: Optional[datetime] = None
    reservation_date: Optional[date] = None
    reservation_time: Optional[time] = None
    reservation_people: Optional[int] = Field(None, gt=0)

    @field_validator("reservation_date", mode="before")
    @classmethod
    def _parse_reservation_date(cls, value: Any) -> Any:
        if isinstance(value, str) and "/" in value:
            try:
                return datetime.strptime(value.strip(), "%d/%m/%Y").date()
            except ValueError as exc:
                raise ValueError("reservation date must be dd/mm/yyyy or ISO-8601") from exc
        return value

    @field_validator("customer_name", mode="before")
    @classmethod
    def _blank_name_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_customer(self) -> "DiningTable":
        if self.status in ("occupied", "reserved") and not self.customer_name:
            raise ValueError(f"a {self.status} table needs a customer name")
        return self


class MenuItem(StoredRecord):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    category: MenuCategory = "food"
    active: bool = Field(True, validation_alias=AliasChoices("active", "isActive", "is_active"))

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Any:
        return _normalize_choice(value, CATEGORY_ALIASES)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class MenuItemRef(BaseModel):
    """Snapshot of a menu item taken when the order was recorded."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    price: float = Field(..., ge=0, allow_inf_nan=False)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class TransactionLine(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    menu_item: MenuItemRef
    quantity: int = Field(..., gt=0)

    @property
    def subtotal(self) -> float:
        return self.menu_item.price * self.quantity


class TransactionRecord(StoredRecord):
    kind: TransactionKind = "dine_in"
    table_number: Optional[int] = Field(None, gt=0)
    customer_name: str = Field(..., min_length=1)
    items: list[TransactionLine] = Field(..., min_length=1)
    total_amount: float = 0
    timestamp: datetime = Field(default_factory=utcnow)
    status: TransactionStatus = "pending"
    payment_method: Optional[PaymentMethod] = None
    operator_role: Optional[UserRole] = None

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        return _normalize_choice(value, KIND_ALIASES)

    @field_validator("payment_method", mode="before")
    @classmethod
    def _normalize_payment_method(cls, value: Any) -> Any:
        if value in ("", None):
            return None
        return _normalize_choice(value, PAYMENT_METHOD_ALIASES)

    @model_validator(mode="after")
    def _recompute_total(self) -> "TransactionRecord":
        if self.kind == "dine_in" and self.table_number is None:
            raise ValueError("a dine-in transaction needs a table number")
        # The stored total is derived from the lines, never taken from input
        self.total_amount = compute_total(self.items)
        if not math.isfinite(self.total_amount):
            raise ValueError("order total is out of range")
        return self


class AppUser(StoredRecord):
    name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password_hash: str
    role: UserRole = "staff"
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("username must not be blank")
        return value


def compute_total(lines: list[TransactionLine]) -> float:
    return round(sum(line.subtotal for line in lines), 2)


def build_record(model: type[StoredRecord], data: dict[str, Any]) -> Any:
    """Validate ``data`` into ``model``, raising the service-level error."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc)) from exc


def revise(record: StoredRecord, **changes: Any) -> Any:
    """Return a re-validated copy of ``record`` with ``changes`` applied."""
    data = record.model_dump()
    data.update(changes)
    return build_record(type(record), data)


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid record"
