"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from getfit.config import Settings
from getfit.containers import AppContainer
from getfit.domain.errors import PersistenceError
from getfit.domain.profiles import Profile, Reminder
from getfit.services.backup import BackupService
from getfit.services.context import TrackerContext
from getfit.services.estimation import EstimationClient, EstimationService
from getfit.services.reminders import Notifier, ReminderService
from getfit.services.stats import StatsService
from getfit.services.steps import StepSyncService
from getfit.services.storage import InMemoryKeyValueStore


@dataclass
class FailingKeyValueStore(InMemoryKeyValueStore):
    """In-memory store whose writes fail while ``failing`` is set.

    Reads fail while ``failing_reads`` is set.
    """

    failing: bool = False
    failing_reads: bool = False

    def get(self, key: str) -> str | None:
        if self.failing_reads:
            raise PersistenceError(f"Connection reset reading {key}")
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        if self.failing:
            raise PersistenceError(f"Quota exceeded writing {key}")
        super().set(key, value)


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake model client returning a fixed answer and recording requests."""

    answer: str = (
        '{"foodName": "Banana", "calories": 105, '
        '"macros": {"protein": 1.3, "carbs": 27, "fat": 0.4}, '
        '"confidence": "high", "servingSize": "1 medium"}'
    )
    error: Exception | None = None
    requests: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        image_data_url: str | None,
        web_search: bool,
    ) -> str:
        self.requests.append(
            {
                "model": model,
                "prompt": prompt,
                "image_data_url": image_data_url,
                "web_search": web_search,
            }
        )
        if self.error is not None:
            raise self.error
        return self.answer


@dataclass
class RecordingNotifier(Notifier):
    """Notifier that remembers every reminder it was asked to send."""

    sent: list[tuple[str, str]] = field(default_factory=list)

    async def notify(self, profile: Profile, reminder: Reminder) -> None:
        self.sent.append((profile.id, reminder.id))


def at(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Return a UTC timestamp."""
    return datetime(year, month, day, hour, minute, tzinfo=UTC)


def make_context(store: InMemoryKeyValueStore | None = None) -> TrackerContext:
    if store is None:
        store = InMemoryKeyValueStore()
    context = TrackerContext.create(store)
    context.load()
    return context


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def context(store: InMemoryKeyValueStore) -> TrackerContext:
    return make_context(store)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        data_file=tmp_path / "getfit_data.json",
        openai_api_key=None,
        reminder_webhook_url=None,
        reminder_poll_seconds=3600,
    )


@pytest.fixture
def estimation_client() -> FakeEstimationClient:
    return FakeEstimationClient()


@pytest.fixture
def container(
    settings: Settings,
    context: TrackerContext,
    estimation_client: FakeEstimationClient,
) -> AppContainer:
    estimation_service = EstimationService(
        client=estimation_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        context.flush()

    return AppContainer(
        settings=settings,
        context=context,
        stats_service=StatsService(context),
        step_sync_service=StepSyncService(context),
        estimation_service=estimation_service,
        backup_service=BackupService(context, version=settings.app_version),
        reminder_service=ReminderService(
            profiles=context.profiles,
            notifier=RecordingNotifier(),
            tz=context.tz,
        ),
        close_resources=close_resources,
    )
