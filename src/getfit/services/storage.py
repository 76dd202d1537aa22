"""Key-value persistence interface and key layout."""

from dataclasses import dataclass, field
from typing import Protocol

COLLECTIONS = ("foods", "exercises", "weights", "measurements")


class KeyValueStore(Protocol):
    """Flat string key-value store holding JSON text values."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""

    def keys(self) -> list[str]:
        """Return every stored key."""


@dataclass(frozen=True)
class StorageKeys:
    """Builds store keys for a namespace.

    Per-profile collections live at ``{namespace}_{collection}_{profile_id}``.
    The profile list and the active profile id are global keys.
    """

    namespace: str = "vs"

    @property
    def prefix(self) -> str:
        return f"{self.namespace}_"

    @property
    def profiles(self) -> str:
        return f"{self.namespace}_profiles"

    @property
    def active_id(self) -> str:
        return f"{self.namespace}_active_id"

    @property
    def legacy_profile(self) -> str:
        return f"{self.namespace}_profile"

    def collection(self, name: str, profile_id: str) -> str:
        return f"{self.namespace}_{name}_{profile_id}"

    def legacy_collection(self, name: str) -> str:
        return f"{self.namespace}_{name}"

    def collection_name(self, key: str) -> str | None:
        """Return the collection a per-profile or legacy collection key holds."""
        for name in COLLECTIONS:
            legacy = self.legacy_collection(name)
            if key == legacy or key.startswith(f"{legacy}_"):
                return name
        return None

    def is_namespaced(self, key: str) -> bool:
        return key.startswith(self.prefix)


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and ephemeral sessions."""

    data: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self.data)
