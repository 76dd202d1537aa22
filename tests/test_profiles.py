"""Tests for profiles and the active-profile context."""

import json
from dataclasses import replace

import pytest

from getfit.domain.entries import BodyMeasurements, FoodEntry, WeightEntry
from getfit.domain.errors import PersistenceError, ValidationError
from getfit.domain.profiles import Gender
from getfit.services.context import TrackerContext
from getfit.services.profiles import DEFAULT_PROFILE_ID, ProfileService
from getfit.services.storage import InMemoryKeyValueStore, StorageKeys
from tests.conftest import FailingKeyValueStore, at, make_context


def test_first_run_creates_default_profile(store: InMemoryKeyValueStore) -> None:
    context = make_context(store)

    profile = context.active_profile
    assert profile.id == DEFAULT_PROFILE_ID
    assert (profile.name, profile.gender, profile.age, profile.height_cm) == (
        "User",
        Gender.FEMALE,
        30,
        165,
    )
    assert store.data["vs_active_id"] == DEFAULT_PROFILE_ID
    assert json.loads(store.data["vs_profiles"])[0]["id"] == DEFAULT_PROFILE_ID


def test_legacy_single_profile_data_is_migrated() -> None:
    store = InMemoryKeyValueStore(
        {
            "vs_profile": json.dumps(
                {"name": "Sam", "gender": "male", "age": 41, "heightCm": 180}
            ),
            "vs_foods": json.dumps(
                [
                    {
                        "id": "f1",
                        "date": "2024-01-01T08:00:00Z",
                        "name": "Eggs",
                        "calories": 150,
                    }
                ]
            ),
        }
    )

    context = make_context(store)

    profile = context.active_profile
    assert profile.id == DEFAULT_PROFILE_ID
    assert profile.name == "Sam"
    assert profile.gender == Gender.MALE
    assert profile.height_cm == 180
    assert f"vs_foods_{DEFAULT_PROFILE_ID}" in store.data
    assert [food.name for food in context.foods.list()] == ["Eggs"]


def test_stored_active_id_is_restored_and_unknown_falls_back() -> None:
    store = InMemoryKeyValueStore()
    context = make_context(store)
    second = context.add_profile()
    context.flush()

    assert make_context(store).active_profile_id == second.id

    store.data["vs_active_id"] = "ghost"
    assert make_context(store).active_profile_id == DEFAULT_PROFILE_ID


def test_switch_profile_isolates_collections(context: TrackerContext) -> None:
    context.log_food(FoodEntry(name="Pasta", calories=600))
    second = context.add_profile()

    assert context.active_profile_id == second.id
    assert context.foods.list() == []
    context.log_food(FoodEntry(name="Salad", calories=200))

    context.switch_profile(DEFAULT_PROFILE_ID)

    assert [food.name for food in context.foods.list()] == ["Pasta"]
    context.switch_profile(second.id)
    assert [food.name for food in context.foods.list()] == ["Salad"]


def test_switch_to_unknown_profile_fails(context: TrackerContext) -> None:
    with pytest.raises(ValidationError):
        context.switch_profile("nobody")


def test_update_profile_persists(context: TrackerContext) -> None:
    updated = replace(context.active_profile, name="Kim", target_weight=58.0)

    context.update_profile(updated)
    context.flush()

    reloaded = make_context(context.store)
    assert reloaded.active_profile.name == "Kim"
    assert reloaded.active_profile.target_weight == 58.0


def test_update_unknown_profile_fails(store: InMemoryKeyValueStore) -> None:
    service = ProfileService(store, StorageKeys())
    service.load()

    with pytest.raises(ValidationError):
        service.update_profile(replace(service.active_profile, id="missing"))


def test_latest_weight_and_measurement_sync(context: TrackerContext) -> None:
    assert context.latest_weight() == 70.0

    context.log_weight(WeightEntry(weight=64.5, logged_at=at(2024, 2, 1)))
    context.log_weight(WeightEntry(weight=66.0, logged_at=at(2024, 1, 1)))
    entry = context.log_measurement(BodyMeasurements(waist=72))

    assert context.latest_weight() == 64.5
    assert entry.synced_weight == 64.5
    assert entry.measurements.waist == 72


def test_flush_reports_storage_failure() -> None:
    store = FailingKeyValueStore()
    context = make_context(store)
    store.failing = True

    context.log_food(FoodEntry(name="Cake", calories=350))

    assert context.flush() is False
    assert [food.name for food in context.foods.list()] == ["Cake"]


def _stored_profile(profile_id: str, name: str) -> dict[str, object]:
    return {
        "id": profile_id,
        "name": name,
        "gender": "female",
        "age": 33,
        "heightCm": 170,
    }


def test_failed_read_at_startup_does_not_reinitialize() -> None:
    store = FailingKeyValueStore(
        {
            "vs_profiles": json.dumps([_stored_profile("user_1", "Ann")]),
            "vs_active_id": "user_1",
        }
    )
    before = dict(store.data)
    context = TrackerContext.create(store)
    store.failing_reads = True

    with pytest.raises(PersistenceError):
        context.load()

    assert store.data == before
    assert not context.profiles.dirty

    store.failing_reads = False
    context.load()

    assert context.active_profile.name == "Ann"
    assert store.data == before


def test_wrong_shape_profile_list_counts_as_first_run() -> None:
    store = InMemoryKeyValueStore({"vs_profiles": json.dumps([1, "x"])})

    context = make_context(store)

    assert context.active_profile_id == DEFAULT_PROFILE_ID
    assert json.loads(store.data["vs_profiles"])[0]["id"] == DEFAULT_PROFILE_ID


def test_failed_read_on_switch_keeps_previous_profile() -> None:
    store = FailingKeyValueStore()
    context = make_context(store)
    context.log_food(FoodEntry(name="Pasta", calories=600))
    second = context.add_profile()
    context.switch_profile(DEFAULT_PROFILE_ID)
    store.failing_reads = True

    with pytest.raises(PersistenceError):
        context.switch_profile(second.id)

    assert context.active_profile_id == DEFAULT_PROFILE_ID
    assert [food.name for food in context.foods.list()] == ["Pasta"]
