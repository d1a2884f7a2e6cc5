from __future__ import annotations

import logging
from typing import Iterable, Optional

from restopos.core.errors import NotFoundError, ValidationError
from restopos.repositories.menu import MenuRepository
from restopos.repositories.transactions import TransactionRepository
from restopos.schemas.entities import (
    TransactionRecord,
    build_record,
    revise,
)
from restopos.services.tables import TableService

logger = logging.getLogger(__name__)


def _line_quantity(entry: dict) -> int:
    raw = entry.get("quantity", entry.get("qty"))
    try:
        quantity = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid quantity: {raw!r}") from exc
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than zero")
    return quantity


class TransactionService:
    def __init__(
        self,
        transactions: TransactionRepository,
        menu: MenuRepository,
        tables: TableService,
    ) -> None:
        self._transactions = transactions
        self._menu = menu
        self._tables = tables

    def list_transactions(self, status: Optional[str] = None) -> list[TransactionRecord]:
        return self._transactions.list_by_status(status)

    def get_transaction(self, transaction_id: str) -> TransactionRecord:
        return self._transactions.get(transaction_id)

    def _resolve_lines(self, lines: Iterable[dict]) -> list[dict]:
        """Price each ordered line from the live menu, merging repeats."""
        menu = {item.id: item for item in self._menu.load()}
        merged: dict[str, dict] = {}
        for entry in lines:
            item_id = str(entry.get("menu_item_id", entry.get("item_id", "")) or "")
            quantity = _line_quantity(entry)
            item = menu.get(item_id)
            if item is None:
                raise NotFoundError(f"Menu item {item_id} not found")
            if not item.active:
                raise ValidationError(f"Menu item {item.name} is not available")
            if item_id in merged:
                merged[item_id]["quantity"] += quantity
            else:
                merged[item_id] = {
                    "menu_item": {"id": item.id, "name": item.name, "price": item.price},
                    "quantity": quantity,
                }
        if not merged:
            raise ValidationError("An order needs at least one item")
        return list(merged.values())

    def create_dine_in(
        self,
        table_number: int,
        customer_name: str,
        lines: Iterable[dict],
        operator_role: Optional[str] = None,
    ) -> TransactionRecord:
        table = self._tables.get_table(table_number)
        record = build_record(
            TransactionRecord,
            {
                "kind": "dine_in",
                "table_number": table.number,
                "customer_name": customer_name,
                "items": self._resolve_lines(lines),
                "operator_role": operator_role,
            },
        )
        self._tables.seat_for_order(table.number, record.customer_name)
        self._transactions.upsert(record)
        logger.info(
            "Dine-in transaction recorded id=%s table=%s total=%s",
            record.id,
            table.number,
            record.total_amount,
        )
        return record

    def create_takeaway(
        self,
        customer_name: str,
        lines: Iterable[dict],
        operator_role: Optional[str] = None,
    ) -> TransactionRecord:
        record = build_record(
            TransactionRecord,
            {
                "kind": "takeaway",
                "customer_name": customer_name,
                "items": self._resolve_lines(lines),
                "operator_role": operator_role,
            },
        )
        self._transactions.upsert(record)
        logger.info("Takeaway transaction recorded id=%s total=%s", record.id, record.total_amount)
        return record

    def set_payment_method(self, transaction_id: str, method: Optional[str]) -> TransactionRecord:
        return self._transactions.mutate(
            transaction_id,
            lambda current: revise(current, payment_method=method),
        )

    def set_status(self, transaction_id: str, status: str) -> TransactionRecord:
        def _apply(current: TransactionRecord) -> TransactionRecord:
            if status == "paid" and not current.payment_method:
                raise ValidationError("Choose a payment method before marking the order paid")
            return revise(current, status=status)

        updated = self._transactions.mutate(transaction_id, _apply)
        logger.info("Transaction status changed id=%s status=%s", transaction_id, updated.status)
        return updated

    def delete_transaction(self, transaction_id: str) -> None:
        self._transactions.delete(transaction_id)
