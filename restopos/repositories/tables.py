from __future__ import annotations

from restopos.core.errors import NotFoundError, ValidationError
from restopos.repositories.base import CollectionRepository
from restopos.schemas.entities import DiningTable


def ensure_unique_number(records: list[DiningTable], candidate: DiningTable) -> None:
    for record in records:
        if record.number == candidate.number and record.id != candidate.id:
            raise ValidationError(f"Table number {candidate.number} already exists")


class TableRepository(CollectionRepository[DiningTable]):
    key = "tables"
    model = DiningTable
    label = "table"

    def find_by_number(self, number: int) -> DiningTable | None:
        for table in self.load():
            if table.number == number:
                return table
        return None

    def get_by_number(self, number: int) -> DiningTable:
        table = self.find_by_number(number)
        if table is None:
            raise NotFoundError(f"Table {number} not found")
        return table

    def next_number(self) -> int:
        numbers = [table.number for table in self.load()]
        return max(numbers) + 1 if numbers else 1
