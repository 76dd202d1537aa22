"""JSON file backed key-value store."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from getfit.domain.errors import PersistenceError
from getfit.services.storage import KeyValueStore


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Keeps every key in one JSON object on disk.

    The file is read lazily on first access and rewritten through a temporary
    file on every write.
    """

    path: Path
    _data: dict[str, str] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._write()

    def delete(self, key: str) -> None:
        if self._load().pop(key, None) is not None:
            self._write()

    def keys(self) -> list[str]:
        return list(self._load())

    def _load(self) -> dict[str, str]:
        if self._loaded:
            return self._data
        if self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise PersistenceError(f"Failed to read {self.path}") from exc
            if not isinstance(raw, dict):
                raise PersistenceError(f"{self.path} does not hold a JSON object")
            self._data = {
                str(key): value for key, value in raw.items() if isinstance(value, str)
            }
        self._loaded = True
        return self._data

    def _write(self) -> None:
        temp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8"
            )
            temp_path.replace(self.path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write {self.path}") from exc
