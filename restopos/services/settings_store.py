from __future__ import annotations

import logging

from restopos.models.app_setting import AppSetting
from restopos.schemas.settings import SETTING_KEYS, ConnectionSettings
from restopos.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class SettingsStore:
    """String settings kept beside the entity collections.

    Shares the engine and lazy schema creation of the key/value store.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get(self, name: str) -> str | None:
        with self._store.session() as db:
            row = db.get(AppSetting, name)
            return row.value if row is not None else None

    def set(self, name: str, value: str) -> None:
        with self._store.session() as db:
            row = db.get(AppSetting, name)
            if row is None:
                db.add(AppSetting(key=name, value=value))
            else:
                row.value = value

    def remove(self, name: str) -> None:
        with self._store.session() as db:
            row = db.get(AppSetting, name)
            if row is not None:
                db.delete(row)

    def snapshot(self) -> dict[str, str | None]:
        return {name: self.get(name) for name in SETTING_KEYS}

    def load_connection_settings(self) -> ConnectionSettings:
        return ConnectionSettings(**self.snapshot())

    def save_connection_settings(self, settings: ConnectionSettings) -> ConnectionSettings:
        for name, value in settings.model_dump().items():
            if value is None:
                self.remove(name)
            else:
                self.set(name, value)
        logger.info(
            "Connection settings saved configured=%s",
            ",".join(name for name, value in settings.model_dump().items() if value) or "none",
        )
        return settings
