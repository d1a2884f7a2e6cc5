from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from restopos.core.errors import StorageError, ValidationError
from restopos.schemas.settings import SETTING_KEYS
from restopos.services.kv_store import ENTITY_KEYS, KeyValueStore
from restopos.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1


class BackupService:
    """Snapshot and restore of every entity key plus the connection settings.

    The payload keeps the section names of the browser backups (``idb`` for
    entity collections, ``localStorage`` for settings) so files exported by
    either build can be restored by the other.
    """

    def __init__(self, store: KeyValueStore, settings: SettingsStore) -> None:
        self._store = store
        self._settings = settings

    def export_backup(self) -> dict[str, Any]:
        idb: dict[str, Any] = {}
        for key in ENTITY_KEYS:
            try:
                idb[key] = self._store.get(key)
            except StorageError:
                logger.exception("Backup could not read key=%s; exporting null", key)
                idb[key] = None
        return {
            "version": BACKUP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "idb": idb,
            "localStorage": {name: self._settings.get(name) for name in SETTING_KEYS},
        }

    def export_backup_json(self) -> str:
        return json.dumps(self.export_backup(), indent=2, ensure_ascii=False)

    def import_backup_json(self, text: str) -> dict[str, list[str]]:
        """Overwrite stored keys and settings with the content of a backup.

        Keys are applied one at a time; a failure part way through leaves the
        keys already written in place.
        """
        try:
            parsed = json.loads(text)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Backup file is not valid JSON") from exc
        if not isinstance(parsed, dict):
            raise ValidationError("Backup file must contain a JSON object")

        version = parsed.get("version")
        if version is not None and version != BACKUP_VERSION:
            logger.warning("Importing backup with unknown version=%s", version)

        restored: list[str] = []
        idb = parsed.get("idb")
        if isinstance(idb, dict):
            for key, value in idb.items():
                self._store.set(key, value)
                restored.append(key)

        settings_applied: list[str] = []
        settings_removed: list[str] = []
        local = parsed.get("localStorage")
        if isinstance(local, dict):
            for name, value in local.items():
                if isinstance(value, str):
                    self._settings.set(name, value)
                    settings_applied.append(name)
                else:
                    self._settings.remove(name)
                    settings_removed.append(name)

        logger.info(
            "Backup imported keys=%s settings_set=%s settings_removed=%s",
            ",".join(restored) or "none",
            len(settings_applied),
            len(settings_removed),
        )
        return {
            "restored_keys": restored,
            "settings_applied": settings_applied,
            "settings_removed": settings_removed,
        }
