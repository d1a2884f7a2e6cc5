from __future__ import annotations

from restopos.repositories.base import CollectionRepository
from restopos.schemas.entities import TransactionRecord


class TransactionRepository(CollectionRepository[TransactionRecord]):
    key = "transactions"
    model = TransactionRecord
    label = "transaction"

    def list_by_status(self, status: str | None = None) -> list[TransactionRecord]:
        records = self.load()
        if status is None:
            return records
        return [record for record in records if record.status == status]
