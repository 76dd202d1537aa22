"""Application context bound to the active profile."""

import logging
from dataclasses import dataclass, field
from datetime import date, tzinfo
from zoneinfo import ZoneInfo

from getfit.domain.entries import (
    BodyMeasurements,
    ExerciseEntry,
    FoodEntry,
    MeasurementEntry,
    WeightEntry,
)
from getfit.domain.errors import ValidationError
from getfit.domain.profiles import Profile
from getfit.services.aggregation import local_date
from getfit.services.entries import EntryStore, T
from getfit.services.profiles import ProfileService
from getfit.services.serialization import (
    EXERCISE_CODEC,
    FOOD_CODEC,
    MEASUREMENT_CODEC,
    WEIGHT_CODEC,
)
from getfit.services.storage import KeyValueStore, StorageKeys

DEFAULT_WEIGHT_KG = 70.0

_logger = logging.getLogger(__name__)


@dataclass
class TrackerContext:
    """Active profile plus its four entry collections.

    Every derivation and aggregation call reads its data through a context
    rather than a global "current profile".
    """

    store: KeyValueStore
    keys: StorageKeys
    profiles: ProfileService
    tz: tzinfo
    default_weight_kg: float = DEFAULT_WEIGHT_KG
    foods: EntryStore[FoodEntry] = field(init=False)
    exercises: EntryStore[ExerciseEntry] = field(init=False)
    weights: EntryStore[WeightEntry] = field(init=False)
    measurements: EntryStore[MeasurementEntry] = field(init=False)

    @classmethod
    def create(
        cls,
        store: KeyValueStore,
        namespace: str = "vs",
        timezone_name: str = "UTC",
        default_weight_kg: float = DEFAULT_WEIGHT_KG,
    ) -> "TrackerContext":
        """Create a context; call ``load`` before use."""
        keys = StorageKeys(namespace)
        return cls(
            store=store,
            keys=keys,
            profiles=ProfileService(store, keys),
            tz=ZoneInfo(timezone_name),
            default_weight_kg=default_weight_kg,
        )

    def __post_init__(self) -> None:
        self._bind("")

    @property
    def active_profile_id(self) -> str:
        return self.profiles.active_id

    @property
    def active_profile(self) -> Profile:
        return self.profiles.active_profile

    def load(self) -> bool:
        """Load profiles and the active profile's collections."""
        self.profiles.load()
        self._bind(self.profiles.active_id)
        return self.flush()

    def reload(self) -> bool:
        """Discard in-memory state and read everything from the store again."""
        return self.load()

    def switch_profile(self, profile_id: str) -> Profile:
        """Make another profile active and load its collections.

        If the new profile's collections cannot be read the previous profile
        stays active.
        """
        if self.profiles.get(profile_id) is None:
            raise ValidationError(f"Unknown profile: {profile_id}")
        if not self.flush():
            _logger.warning(
                "Dropping unsaved changes of profile %s", self.active_profile_id
            )
        self._bind(profile_id)
        self.profiles.set_active(profile_id)
        self.profiles.flush()
        _logger.info("Switched to profile %s", profile_id)
        return self.active_profile

    def add_profile(self) -> Profile:
        """Create a new profile and switch to it."""
        self.flush()
        profile = self.profiles.new_profile()
        self._bind(profile.id)
        self.profiles.add_profile(profile)
        self.profiles.flush()
        return profile

    def update_profile(self, profile: Profile) -> Profile:
        return self.profiles.update_profile(profile)

    def flush(self) -> bool:
        """Write every pending change. Returns False if any write failed."""
        results = [
            self.profiles.flush(),
            self.foods.flush(),
            self.exercises.flush(),
            self.weights.flush(),
            self.measurements.flush(),
        ]
        return all(results)

    def log_food(self, entry: FoodEntry) -> FoodEntry:
        return self.foods.append(entry)

    def log_exercise(self, entry: ExerciseEntry) -> ExerciseEntry:
        return self.exercises.append(entry)

    def log_weight(self, entry: WeightEntry) -> WeightEntry:
        return self.weights.append(entry)

    def log_measurement(self, measurements: BodyMeasurements) -> MeasurementEntry:
        """Log measurements stamped with the current weight."""
        entry = MeasurementEntry(
            measurements=measurements,
            synced_weight=self.latest_weight(),
        )
        return self.measurements.append(entry)

    def delete_food(self, entry_id: str) -> None:
        self.foods.remove(entry_id)

    def delete_exercise(self, entry_id: str) -> None:
        self.exercises.remove(entry_id)

    def delete_weight(self, entry_id: str) -> None:
        self.weights.remove(entry_id)

    def delete_measurement(self, entry_id: str) -> None:
        self.measurements.remove(entry_id)

    def latest_weight(self) -> float:
        """Return the most recent weight, or the default when none is logged."""
        weights = self.weights.list()
        if not weights:
            return self.default_weight_kg
        return max(weights, key=lambda entry: entry.logged_at).weight

    def entry_date(self, entry: T) -> date:
        return local_date(entry.logged_at, self.tz)

    def on_day(self, entries: list[T], day: date) -> list[T]:
        """Return the entries whose local calendar date is ``day``."""
        return [entry for entry in entries if self.entry_date(entry) == day]

    def _bind(self, profile_id: str) -> None:
        """Point the entry stores at a profile's collections.

        Every collection is read before any store is replaced, so a failed
        read leaves the context bound to its previous profile.
        """
        foods = EntryStore(
            self.store, self.keys.collection("foods", profile_id), FOOD_CODEC
        )
        exercises = EntryStore(
            self.store, self.keys.collection("exercises", profile_id), EXERCISE_CODEC
        )
        weights = EntryStore(
            self.store, self.keys.collection("weights", profile_id), WEIGHT_CODEC
        )
        measurements = EntryStore(
            self.store,
            self.keys.collection("measurements", profile_id),
            MEASUREMENT_CODEC,
        )
        if profile_id:
            for collection in (foods, exercises, weights, measurements):
                collection.load()
        self.foods = foods
        self.exercises = exercises
        self.weights = weights
        self.measurements = measurements
