"""Tests for backup export, import and reset."""

import json
from datetime import date

import pytest

from getfit.domain.entries import FoodEntry, WeightEntry
from getfit.domain.errors import ValidationError
from getfit.services.backup import META_KEY, BackupService
from getfit.services.context import TrackerContext
from getfit.services.profiles import DEFAULT_PROFILE_ID
from getfit.services.storage import InMemoryKeyValueStore
from tests.conftest import FailingKeyValueStore, at, make_context


def test_export_contains_namespaced_keys_and_meta(context: TrackerContext) -> None:
    context.store.set("other_app_setting", "1")
    context.log_food(FoodEntry(name="Apple", calories=95, logged_at=at(2024, 1, 1)))
    service = BackupService(context, version="1.2.0")

    exported = service.export(now=at(2024, 1, 2))

    assert "other_app_setting" not in exported
    assert f"vs_foods_{DEFAULT_PROFILE_ID}" in exported
    assert exported["vs_active_id"] == DEFAULT_PROFILE_ID
    meta = exported[META_KEY]
    assert meta["version"] == "1.2.0"
    assert meta["platform"] == "python"
    assert meta["entryCount"] == len(exported) - 1
    assert service.filename(date(2024, 1, 2)) == "getfit_backup_v1_2_0_2024-01-02.json"


def test_round_trip_restores_entries_into_fresh_store(context: TrackerContext) -> None:
    context.log_weight(WeightEntry(weight=68.2, logged_at=at(2024, 1, 1)))
    second = context.add_profile()
    context.log_food(FoodEntry(name="Soup", calories=220))
    exported = BackupService(context, version="1.0.0").export()

    fresh = make_context(InMemoryKeyValueStore())
    result = BackupService(fresh, version="1.0.0").import_backup(json.dumps(exported))

    assert result.imported == len(exported) - 1
    assert result.meta is not None
    assert result.meta.version == "1.0.0"
    assert fresh.active_profile_id == second.id
    assert [food.name for food in fresh.foods.list()] == ["Soup"]
    fresh.switch_profile(DEFAULT_PROFILE_ID)
    assert [weight.weight for weight in fresh.weights.list()] == [68.2]


def test_import_replaces_rather_than_merges(context: TrackerContext) -> None:
    context.log_food(FoodEntry(name="Old", calories=1))
    context.flush()
    context.store.set("vs_foods_stale_profile", "[]")
    backup = {
        "vs_profiles": json.dumps(
            [
                {
                    "id": "p9",
                    "name": "Restored",
                    "gender": "male",
                    "age": 50,
                    "heightCm": 175,
                }
            ]
        ),
        "vs_active_id": "p9",
    }

    BackupService(context, version="1.0.0").import_backup(json.dumps(backup))

    assert "vs_foods_stale_profile" not in context.store.keys()
    assert f"vs_foods_{DEFAULT_PROFILE_ID}" not in context.store.keys()
    assert context.active_profile.name == "Restored"
    assert context.foods.list() == []


def test_import_with_only_unrelated_keys_leaves_data_untouched(
    context: TrackerContext,
) -> None:
    context.log_food(FoodEntry(name="Keep me", calories=10))
    context.flush()
    before = dict(context.store.data)

    result = BackupService(context, version="1.0.0").import_backup(
        json.dumps({"theme": "dark", META_KEY: {"version": "0.9"}})
    )

    assert result.imported == 0
    assert result.meta is not None
    assert result.meta.version == "0.9"
    assert context.store.data == before
    assert [food.name for food in context.foods.list()] == ["Keep me"]


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        json.dumps(["vs_profiles"]),
        json.dumps({"vs_foods_default_user_1": "{broken"}),
        json.dumps({"vs_profiles": "[]", "vs_foods_default_user_1": '{"a": 1}'}),
        json.dumps({"vs_foods_default_user_1": '[1, "x"]'}),
        json.dumps({"vs_weights": json.dumps([{"id": "w1"}])}),
        json.dumps({"vs_profiles": json.dumps({"id": "p1"})}),
        json.dumps({"vs_profile": "[]"}),
    ],
)
def test_invalid_backup_is_rejected_before_clearing(
    context: TrackerContext, raw: str
) -> None:
    context.log_food(FoodEntry(name="Keep me", calories=10))
    context.flush()
    before = dict(context.store.data)

    with pytest.raises(ValidationError):
        BackupService(context, version="1.0.0").import_backup(raw)

    assert context.store.data == before


def test_reset_clears_namespace_and_recreates_default(context: TrackerContext) -> None:
    context.store.set("unrelated", "x")
    context.add_profile()
    context.log_food(FoodEntry(name="Gone", calories=10))
    context.flush()

    BackupService(context, version="1.0.0").reset()

    assert context.store.get("unrelated") == "x"
    assert [profile.id for profile in context.profiles.list_profiles()] == [
        DEFAULT_PROFILE_ID
    ]
    assert context.foods.list() == []


def test_export_includes_changes_the_store_rejected() -> None:
    store = FailingKeyValueStore()
    context = make_context(store)
    store.failing = True
    context.log_food(FoodEntry(name="Unsaved", calories=300))

    exported = BackupService(context, version="1.0.0").export()

    assert "vs_foods_default_user_1" not in store.data
    rows = json.loads(exported["vs_foods_default_user_1"])
    assert [row["name"] for row in rows] == ["Unsaved"]
    assert exported[META_KEY]["entryCount"] == len(exported) - 1
