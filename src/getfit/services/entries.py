"""Append/delete entry collections persisted to the key-value store."""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Generic, Protocol, TypeVar

from getfit.domain.errors import PersistenceError
from getfit.services.serialization import RowCodec, decode_rows
from getfit.services.storage import KeyValueStore

_logger = logging.getLogger(__name__)


class Entry(Protocol):
    """Attributes every logged entry carries."""

    @property
    def id(self) -> str: ...

    @property
    def logged_at(self) -> datetime: ...


T = TypeVar("T", bound=Entry)


def time_based_id() -> str:
    """Return the current epoch time in milliseconds as an id."""
    return str(time.time_ns() // 1_000_000)


@dataclass
class EntryStore(Generic[T]):
    """Ordered collection of entries for one profile.

    Mutations only touch memory and mark the store dirty; ``flush`` writes the
    whole collection. A failed flush leaves the store dirty so the next flush
    retries.
    """

    store: KeyValueStore
    key: str
    codec: RowCodec[T]
    id_factory: Callable[[], str] = time_based_id
    _entries: list[T] = field(default_factory=list, init=False)
    _dirty: bool = field(default=False, init=False)

    @property
    def dirty(self) -> bool:
        return self._dirty

    def load(self) -> None:
        """Replace in-memory entries with the stored collection.

        A missing or corrupt collection loads as empty. A failed read raises
        ``PersistenceError`` and leaves the current entries untouched.
        """
        raw = self.store.get(self.key)
        entries: list[T] = []
        if raw is not None:
            try:
                entries = decode_rows(raw, self.codec.decode)
            except ValueError as exc:
                _logger.warning("Ignoring corrupt collection %s: %s", self.key, exc)
        self._entries = entries
        self._dirty = False

    def append(self, entry: T) -> T:
        """Add an entry, assigning an id when it has none."""
        if not entry.id:
            entry = replace(entry, id=self._next_id())
        self._entries.append(entry)
        self._dirty = True
        return entry

    def remove(self, entry_id: str) -> None:
        """Delete an entry by id; unknown ids are ignored."""
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            return
        self._entries = remaining
        self._dirty = True

    def get(self, entry_id: str) -> T | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def list(self) -> list[T]:
        """Return entries in insertion order."""
        return list(self._entries)

    def serialize(self) -> str:
        """Return the in-memory collection as stored JSON text."""
        return json.dumps([self.codec.encode(entry) for entry in self._entries])

    def flush(self) -> bool:
        """Persist the collection if it changed. Returns False on write failure."""
        if not self._dirty:
            return True
        payload = self.serialize()
        try:
            self.store.set(self.key, payload)
        except PersistenceError as exc:
            _logger.warning("Failed to persist %s: %s", self.key, exc)
            return False
        self._dirty = False
        return True

    def _next_id(self) -> str:
        existing = {entry.id for entry in self._entries}
        base = self.id_factory()
        candidate = base
        suffix = 1
        while candidate in existing:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate
