"""Backup export, destructive import and full reset."""

import json
import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime

import pydantic

from getfit.domain.backup import BackupMeta, ImportResult
from getfit.domain.errors import ValidationError
from getfit.services.context import TrackerContext
from getfit.services.serialization import (
    COLLECTION_CODECS,
    decode_rows,
    profile_from_dict,
)
from getfit.services.storage import StorageKeys

META_KEY = "getfit_backup_meta"

_logger = logging.getLogger(__name__)


@dataclass
class BackupService:
    """Moves every namespaced key in and out of a single JSON document."""

    context: TrackerContext
    version: str
    platform: str = "python"

    def export(self, now: datetime | None = None) -> dict[str, object]:
        """Return all namespaced keys with their raw values plus metadata.

        Collections that could not be flushed are exported from memory, so the
        backup matches what the tracker shows. The metadata key is outside the
        namespace so importers that only read namespaced keys skip it.
        """
        flushed = self.context.flush()
        store = self.context.store
        data: dict[str, object] = {}
        for key in store.keys():
            if not self.context.keys.is_namespaced(key):
                continue
            value = store.get(key)
            if value is not None:
                data[key] = value
        if not flushed:
            _logger.warning("Storage is behind memory; exporting unsaved changes")
            data.update(self._unsaved())
        data[META_KEY] = {
            "version": self.version,
            "timestamp": (now or datetime.now(tz=UTC)).isoformat(),
            "platform": self.platform,
            "entryCount": len(data),
        }
        return data

    def filename(self, today: date) -> str:
        version = self.version.replace(".", "_")
        return f"getfit_backup_v{version}_{today.isoformat()}.json"

    def import_backup(self, raw: str | bytes) -> ImportResult:
        """Replace all namespaced data with the keys from a backup file.

        The file is validated before anything is deleted: a file with no
        namespaced keys imports nothing and leaves current data untouched, and
        a namespaced value that would not load under its key rejects the whole
        file. Once validation passes this is a destructive overwrite, not a merge.
        """
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ValidationError(
                "Failed to parse backup file. Please ensure it is a valid JSON file."
            ) from exc
        if not isinstance(payload, dict):
            raise ValidationError("Backup file must contain a JSON object.")

        meta = _read_meta(payload.get(META_KEY))
        keys = self.context.keys
        items = {
            key: value
            for key, value in payload.items()
            if keys.is_namespaced(key) and isinstance(value, str)
        }
        if not items:
            _logger.warning("Backup contained no importable keys")
            return ImportResult(imported=0, meta=meta)
        for key, value in items.items():
            if key != keys.active_id:
                _check_value(keys, key, value)

        self._clear_namespace()
        for key, value in items.items():
            self.context.store.set(key, value)
        self.context.reload()
        _logger.info(
            "Imported %s keys from backup version %s",
            len(items),
            meta.version if meta else "Unknown",
        )
        return ImportResult(imported=len(items), meta=meta)

    def reset(self) -> None:
        """Delete all namespaced data and start over with the default profile."""
        self._clear_namespace()
        self.context.reload()
        _logger.info("All tracker data reset")

    def _unsaved(self) -> dict[str, str]:
        context = self.context
        data: dict[str, str] = {}
        if context.profiles.dirty:
            data[context.keys.profiles] = context.profiles.serialize()
            data[context.keys.active_id] = context.profiles.active_id
        for collection in (
            context.foods,
            context.exercises,
            context.weights,
            context.measurements,
        ):
            if collection.dirty:
                data[collection.key] = collection.serialize()
        return data

    def _clear_namespace(self) -> None:
        store = self.context.store
        doomed = [key for key in store.keys() if self.context.keys.is_namespaced(key)]
        for key in doomed:
            store.delete(key)


def _read_meta(raw: object) -> BackupMeta | None:
    if not isinstance(raw, dict):
        return None
    try:
        return BackupMeta.model_validate(raw)
    except pydantic.ValidationError:
        _logger.warning("Ignoring malformed backup metadata")
        return None


def _check_value(keys: StorageKeys, key: str, value: str) -> None:
    """Reject a backup value that would not load under its key."""
    collection = keys.collection_name(key)
    try:
        if key == keys.profiles:
            decode_rows(value, profile_from_dict)
        elif collection is not None:
            decode_rows(value, COLLECTION_CODECS[collection].decode)
        elif key == keys.legacy_profile:
            if not isinstance(json.loads(value), dict):
                raise ValueError("Expected a JSON object")
        else:
            json.loads(value)
    except ValueError as exc:
        raise ValidationError(f"Backup value for {key} is not valid: {exc}") from exc
