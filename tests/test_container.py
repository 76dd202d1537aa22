"""Tests for container wiring."""

import asyncio

import pytest

from getfit.adapters.file_key_value_store import JsonFileKeyValueStore
from getfit.containers import build_container, build_store
from getfit.services.reminders import LoggingNotifier


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.stats_service is not None
    assert container.estimation_service.client is None
    assert isinstance(container.reminder_service.notifier, LoggingNotifier)
    assert container.context.active_profile.name == "User"
    asyncio.run(container.close_resources())
    assert settings.data_file.exists()


def test_build_store_defaults_to_json_file(settings) -> None:
    assert isinstance(build_store(settings), JsonFileKeyValueStore)


def test_supabase_backend_requires_credentials(settings) -> None:
    settings.storage_backend = "supabase"

    with pytest.raises(ValueError, match="Supabase"):
        build_store(settings)
