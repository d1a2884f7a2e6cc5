from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import Lock
from typing import Any, Callable, Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.attributes import flag_modified

from restopos.core.database import Base
from restopos.core.errors import StorageError
from restopos.models.app_setting import AppSetting
from restopos.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)

ENTITY_KEYS = ("tables", "transactions", "menu_items", "users")


def _disable_pysqlite_begin(dbapi_connection, _connection_record) -> None:
    # pysqlite defers BEGIN until the first write; SQLAlchemy emits it instead
    dbapi_connection.isolation_level = None


def _begin_immediate(connection) -> None:
    connection.exec_driver_sql("BEGIN IMMEDIATE")


def _lock_sqlite_on_begin(engine: Engine) -> None:
    """Make every SQLite transaction take the write lock before its first read."""
    if engine.dialect.name != "sqlite" or event.contains(engine, "begin", _begin_immediate):
        return
    event.listen(engine, "connect", _disable_pysqlite_begin)
    event.listen(engine, "begin", _begin_immediate)


class KeyValueStore:
    """Key/value namespace over the ``kv_entries`` table.

    Values are JSON documents. Each call runs in its own session and
    transaction; nothing spans more than one key. The tables are created on
    first use, so an unreachable database only fails when it is touched.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        _lock_sqlite_on_begin(engine)
        self._session_factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        self._opened = False
        self._open_lock = Lock()

    @property
    def engine(self) -> Engine:
        return self._engine

    def open(self) -> None:
        if self._opened:
            return
        with self._open_lock:
            if self._opened:
                return
            try:
                Base.metadata.create_all(
                    bind=self._engine,
                    tables=[KVEntry.__table__, AppSetting.__table__],
                )
            except SQLAlchemyError as exc:
                logger.error("Local store unavailable url=%s", self._engine.url)
                raise StorageError("Local store is unavailable") from exc
            self._opened = True
            logger.info("Local store opened url=%s", self._engine.url)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        self.open()
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError(f"Local store operation failed: {exc.__class__.__name__}") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def get(self, key: str) -> Any | None:
        with self.session() as db:
            entry = db.get(KVEntry, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: Any) -> None:
        with self.session() as db:
            entry = db.get(KVEntry, key)
            if entry is None:
                db.add(KVEntry(key=key, value=value))
            else:
                entry.value = value
                flag_modified(entry, "value")
        logger.debug("Stored key", extra={"entity_key": key})

    def delete(self, key: str) -> None:
        with self.session() as db:
            entry = db.get(KVEntry, key)
            if entry is not None:
                db.delete(entry)

    def keys(self) -> list[str]:
        with self.session() as db:
            return [row[0] for row in db.query(KVEntry.key).order_by(KVEntry.key.asc()).all()]

    def update(self, key: str, change: Callable[[Any | None], Any]) -> Any:
        """Read, transform and write one key inside a single transaction.

        ``change`` receives the current value (or None) and returns the value
        to store. Exceptions raised by ``change`` abort the write.
        """
        self._ensure_row(key)
        with self.session() as db:
            entry = db.get(KVEntry, key, with_for_update=True)
            if entry is None:
                raise StorageError(f"Key {key} vanished during update")
            new_value = change(entry.value)
            entry.value = new_value
            flag_modified(entry, "value")
        return new_value

    def _ensure_row(self, key: str) -> None:
        """Insert an empty row for ``key`` so writers can lock it; losing the insert race is fine."""
        self.open()
        db = self._session_factory()
        try:
            if db.get(KVEntry, key) is not None:
                return
            db.add(KVEntry(key=key, value=None))
            db.commit()
        except IntegrityError:
            db.rollback()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError(f"Local store operation failed: {exc.__class__.__name__}") from exc
        finally:
            db.close()
