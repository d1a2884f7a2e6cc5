from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Optional

from restopos.core.errors import ValidationError
from restopos.repositories.tables import TableRepository, ensure_unique_number
from restopos.schemas.entities import DiningTable, build_record, revise, utcnow

logger = logging.getLogger(__name__)

_RESERVATION_CLEARED = {
    "reservation_date": None,
    "reservation_time": None,
    "reservation_people": None,
}


class TableService:
    def __init__(self, tables: TableRepository) -> None:
        self._tables = tables

    def list_tables(self) -> list[DiningTable]:
        return self._tables.load()

    def get_table(self, number: int) -> DiningTable:
        return self._tables.get_by_number(number)

    def add_table(self, capacity: int, number: Optional[int] = None) -> DiningTable:
        if number is None:
            number = self._tables.next_number()
        table = build_record(DiningTable, {"number": number, "capacity": capacity, "status": "empty"})
        self._tables.upsert(table, check=ensure_unique_number)
        logger.info("Table added number=%s capacity=%s", table.number, table.capacity)
        return table

    def change_capacity(self, number: int, capacity: int) -> DiningTable:
        table = self._tables.get_by_number(number)
        return self._tables.mutate(table.id, lambda current: revise(current, capacity=capacity))

    def remove_table(self, number: int) -> None:
        table = self._tables.get_by_number(number)
        self._tables.delete(table.id)
        logger.info("Table removed number=%s", number)

    def reserve(
        self,
        number: int,
        *,
        customer_name: str,
        reservation_date: date | str,
        reservation_time: time | str,
        people: int,
    ) -> DiningTable:
        table = self._tables.get_by_number(number)

        def _reserve(current: DiningTable) -> DiningTable:
            if current.status == "occupied":
                raise ValidationError(f"Table {number} is occupied")
            return revise(
                current,
                status="reserved",
                customer_name=customer_name,
                reservation_date=reservation_date,
                reservation_time=reservation_time,
                reservation_people=people,
                occupied_since=None,
            )

        updated = self._tables.mutate(table.id, _reserve)
        logger.info("Table reserved number=%s people=%s", number, people)
        return updated

    def cancel_reservation(self, number: int) -> DiningTable:
        table = self._tables.get_by_number(number)

        def _cancel(current: DiningTable) -> DiningTable:
            if current.status != "reserved":
                raise ValidationError(f"Table {number} has no reservation")
            return revise(current, status="empty", customer_name=None, **_RESERVATION_CLEARED)

        return self._tables.mutate(table.id, _cancel)

    def occupy(
        self,
        number: int,
        customer_name: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> DiningTable:
        table = self._tables.get_by_number(number)

        def _occupy(current: DiningTable) -> DiningTable:
            if current.status == "occupied":
                raise ValidationError(f"Table {number} is already occupied")
            name = customer_name or (current.customer_name if current.status == "reserved" else None)
            return revise(
                current,
                status="occupied",
                customer_name=name,
                occupied_since=since or utcnow(),
                **_RESERVATION_CLEARED,
            )

        updated = self._tables.mutate(table.id, _occupy)
        logger.info("Table occupied number=%s", number)
        return updated

    def seat_for_order(self, number: int, customer_name: str) -> DiningTable:
        """Occupy the table for a new order unless it is already occupied."""
        table = self._tables.get_by_number(number)

        def _seat(current: DiningTable) -> DiningTable:
            if current.status == "occupied":
                return current
            return revise(
                current,
                status="occupied",
                customer_name=customer_name,
                occupied_since=utcnow(),
                **_RESERVATION_CLEARED,
            )

        return self._tables.mutate(table.id, _seat)

    def finish(self, number: int) -> DiningTable:
        """Free the table once the guests leave."""
        table = self._tables.get_by_number(number)
        updated = self._tables.mutate(
            table.id,
            lambda current: revise(
                current,
                status="empty",
                customer_name=None,
                occupied_since=None,
                **_RESERVATION_CLEARED,
            ),
        )
        logger.info("Table finished number=%s", number)
        return updated
