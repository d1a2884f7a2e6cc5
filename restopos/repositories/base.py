from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterable, TypeVar

from restopos.core.errors import NotFoundError, ValidationError
from restopos.schemas.entities import StoredRecord, build_record
from restopos.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=StoredRecord)


class CollectionRepository(Generic[RecordT]):
    """A list of records stored under one entity key.

    ``load``/``save`` replace the whole collection. The id-keyed operations
    re-read the collection inside the store transaction, so interleaved
    writers keep each other's changes.
    """

    key: str
    model: type[RecordT]
    label: str = "record"

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def _parse(self, raw: Any) -> list[RecordT]:
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning("Ignoring non-list value stored under %s", self.key)
            return []
        return [build_record(self.model, entry) for entry in raw]

    @staticmethod
    def _dump(records: Iterable[RecordT]) -> list[dict[str, Any]]:
        return [record.to_storage() for record in records]

    def load(self) -> list[RecordT]:
        return self._parse(self._store.get(self.key))

    def save(self, records: list[RecordT]) -> None:
        ids = [record.id for record in records]
        if len(ids) != len(set(ids)):
            raise ValidationError(f"Duplicate {self.label} id in collection")
        self._store.set(self.key, self._dump(records))
        logger.info("Saved %s collection size=%s", self.key, len(records))

    def find(self, record_id: str) -> RecordT | None:
        for record in self.load():
            if record.id == record_id:
                return record
        return None

    def get(self, record_id: str) -> RecordT:
        record = self.find(record_id)
        if record is None:
            raise NotFoundError(f"{self.label.capitalize()} {record_id} not found")
        return record

    def upsert(self, record: RecordT, *, check: Callable[[list[RecordT], RecordT], None] | None = None) -> RecordT:
        """Insert ``record`` or replace the stored record with the same id.

        ``check`` runs against the current collection before the write and
        may raise to abort it (used for uniqueness rules).
        """

        def _apply(raw: Any) -> list[dict[str, Any]]:
            records = self._parse(raw)
            if check is not None:
                check(records, record)
            for index, existing in enumerate(records):
                if existing.id == record.id:
                    records[index] = record
                    break
            else:
                records.append(record)
            return self._dump(records)

        self._store.update(self.key, _apply)
        logger.info("Upserted %s id=%s", self.label, record.id)
        return record

    def mutate(
        self,
        record_id: str,
        change: Callable[[RecordT], RecordT],
        *,
        check: Callable[[list[RecordT], RecordT], None] | None = None,
    ) -> RecordT:
        """Apply ``change`` to the stored record atomically and return the result."""
        result: RecordT | None = None

        def _apply(raw: Any) -> list[dict[str, Any]]:
            nonlocal result
            records = self._parse(raw)
            for index, existing in enumerate(records):
                if existing.id == record_id:
                    updated = change(existing)
                    if check is not None:
                        check(records, updated)
                    records[index] = updated
                    result = updated
                    return self._dump(records)
            raise NotFoundError(f"{self.label.capitalize()} {record_id} not found")

        self._store.update(self.key, _apply)
        logger.info("Updated %s id=%s", self.label, record_id)
        return result

    def delete(self, record_id: str) -> None:
        def _apply(raw: Any) -> list[dict[str, Any]]:
            records = self._parse(raw)
            remaining = [record for record in records if record.id != record_id]
            if len(remaining) == len(records):
                raise NotFoundError(f"{self.label.capitalize()} {record_id} not found")
            return self._dump(remaining)

        self._store.update(self.key, _apply)
        logger.info("Deleted %s id=%s", self.label, record_id)
