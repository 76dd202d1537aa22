"""Profile list management."""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from getfit.domain.errors import PersistenceError, ValidationError
from getfit.domain.profiles import Gender, Profile
from getfit.services.serialization import (
    decode_rows,
    profile_from_dict,
    profile_to_dict,
)
from getfit.services.storage import COLLECTIONS, KeyValueStore, StorageKeys

DEFAULT_PROFILE_ID = "default_user_1"

_logger = logging.getLogger(__name__)


def default_profile() -> Profile:
    """Return the profile created on first run."""
    return Profile(
        id=DEFAULT_PROFILE_ID,
        name="User",
        gender=Gender.FEMALE,
        age=30,
        height_cm=165,
    )


def _new_profile_id() -> str:
    return f"user_{time.time_ns() // 1_000_000}"


@dataclass
class ProfileService:
    """Holds the profile list and the active profile id."""

    store: KeyValueStore
    keys: StorageKeys
    id_factory: Callable[[], str] = _new_profile_id
    _profiles: list[Profile] = field(default_factory=list, init=False)
    _active_id: str = field(default="", init=False)
    _dirty: bool = field(default=False, init=False)

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def active_profile(self) -> Profile:
        profile = self.get(self._active_id)
        if profile is None:
            return default_profile()
        return profile

    @property
    def dirty(self) -> bool:
        return self._dirty

    def load(self) -> None:
        """Load profiles, creating the default profile on first run.

        A failed read raises ``PersistenceError`` before any state changes;
        only a missing or corrupt profile list counts as a first run.
        """
        profiles = self._read_profiles()
        if not profiles:
            self._initialize()
            return
        stored_active = self.store.get(self.keys.active_id)
        self._profiles = profiles
        self._dirty = False
        if stored_active and self.get(stored_active) is not None:
            self._active_id = stored_active
        else:
            self._active_id = self._profiles[0].id

    def list_profiles(self) -> list[Profile]:
        return list(self._profiles)

    def get(self, profile_id: str) -> Profile | None:
        for profile in self._profiles:
            if profile.id == profile_id:
                return profile
        return None

    def new_profile(self) -> Profile:
        """Return a profile with default fields, not yet added."""
        return Profile(
            id=self.id_factory(),
            name="New User",
            gender=Gender.FEMALE,
            age=25,
            height_cm=160,
        )

    def add_profile(self, profile: Profile | None = None) -> Profile:
        """Add a profile and make it active."""
        if profile is None:
            profile = self.new_profile()
        self._profiles.append(profile)
        self._active_id = profile.id
        self._dirty = True
        return profile

    def update_profile(self, profile: Profile) -> Profile:
        """Replace the stored profile with the same id."""
        if self.get(profile.id) is None:
            raise ValidationError(f"Unknown profile: {profile.id}")
        self._profiles = [
            profile if existing.id == profile.id else existing
            for existing in self._profiles
        ]
        self._dirty = True
        return profile

    def set_active(self, profile_id: str) -> None:
        if self.get(profile_id) is None:
            raise ValidationError(f"Unknown profile: {profile_id}")
        self._active_id = profile_id
        self._dirty = True

    def serialize(self) -> str:
        """Return the in-memory profile list as stored JSON text."""
        return json.dumps([profile_to_dict(profile) for profile in self._profiles])

    def flush(self) -> bool:
        """Persist the profile list and active id. Returns False on failure."""
        if not self._dirty:
            return True
        payload = self.serialize()
        try:
            self.store.set(self.keys.profiles, payload)
            self.store.set(self.keys.active_id, self._active_id)
        except PersistenceError as exc:
            _logger.warning("Failed to persist profiles: %s", exc)
            return False
        self._dirty = False
        return True

    def _initialize(self) -> None:
        profile = self._from_legacy(default_profile())
        legacy_collections = {
            name: self.store.get(self.keys.legacy_collection(name))
            for name in COLLECTIONS
        }
        self._profiles = [profile]
        self._active_id = profile.id
        self._dirty = True
        self._migrate_legacy_collections(profile.id, legacy_collections)

    def _from_legacy(self, profile: Profile) -> Profile:
        legacy_raw = self.store.get(self.keys.legacy_profile)
        if not legacy_raw:
            return profile
        try:
            legacy = json.loads(legacy_raw)
            if not isinstance(legacy, dict):
                raise ValueError("Expected a JSON object")
            merged = {**profile_to_dict(profile), **legacy, "id": profile.id}
            return profile_from_dict(merged)
        except (TypeError, ValueError) as exc:
            _logger.warning("Ignoring corrupt legacy profile: %s", exc)
            return profile

    def _migrate_legacy_collections(
        self, profile_id: str, legacy_collections: dict[str, str | None]
    ) -> None:
        for name, data in legacy_collections.items():
            if data is None:
                continue
            try:
                self.store.set(self.keys.collection(name, profile_id), data)
            except PersistenceError as exc:
                _logger.warning("Failed to migrate legacy %s: %s", name, exc)
                continue
            _logger.info("Migrated legacy %s to profile %s", name, profile_id)

    def _read_profiles(self) -> list[Profile]:
        raw = self.store.get(self.keys.profiles)
        if not raw:
            return []
        try:
            return decode_rows(raw, profile_from_dict)
        except ValueError as exc:
            _logger.warning("Ignoring corrupt profile list: %s", exc)
            return []
