"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from getfit.adapters.file_key_value_store import JsonFileKeyValueStore
from getfit.adapters.openai_estimation_client import OpenAIEstimationClient
from getfit.adapters.supabase_key_value_store import SupabaseKeyValueStore
from getfit.adapters.webhook_notifier import HttpxWebhookNotifier
from getfit.config import Settings
from getfit.services.backup import BackupService
from getfit.services.context import TrackerContext
from getfit.services.estimation import EstimationService
from getfit.services.reminders import LoggingNotifier, Notifier, ReminderService
from getfit.services.stats import StatsService
from getfit.services.steps import StepSyncService
from getfit.services.storage import KeyValueStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    context: TrackerContext
    stats_service: StatsService
    step_sync_service: StepSyncService
    estimation_service: EstimationService
    backup_service: BackupService
    reminder_service: ReminderService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueStore:
    """Create the configured key-value backend."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage requires SUPABASE_URL and key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client, table=settings.supabase_table)
    return JsonFileKeyValueStore(settings.data_file)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    context = TrackerContext.create(
        build_store(resolved_settings),
        namespace=resolved_settings.storage_namespace,
        timezone_name=resolved_settings.timezone,
        default_weight_kg=resolved_settings.default_weight_kg,
    )
    context.load()

    openai_client = (
        OpenAIEstimationClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    estimation_service = EstimationService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    webhook_notifier = (
        HttpxWebhookNotifier.create(resolved_settings.reminder_webhook_url)
        if resolved_settings.reminder_webhook_url
        else None
    )
    notifier: Notifier = webhook_notifier or LoggingNotifier()
    reminder_service = ReminderService(
        profiles=context.profiles,
        notifier=notifier,
        tz=context.tz,
    )

    async def close_resources() -> None:
        context.flush()
        if openai_client is not None:
            await openai_client.close()
        if webhook_notifier is not None:
            await webhook_notifier.close()

    return AppContainer(
        settings=resolved_settings,
        context=context,
        stats_service=StatsService(context),
        step_sync_service=StepSyncService(context),
        estimation_service=estimation_service,
        backup_service=BackupService(context, version=resolved_settings.app_version),
        reminder_service=reminder_service,
        close_resources=close_resources,
    )
