"""Exercise reminder management and due checks."""

import asyncio
import logging
import re
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, tzinfo
from typing import Protocol

from getfit.domain.errors import ValidationError
from getfit.domain.profiles import Profile, Reminder
from getfit.services.entries import time_based_id
from getfit.services.profiles import ProfileService

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
EVERY_DAY = (0, 1, 2, 3, 4, 5, 6)

_logger = logging.getLogger(__name__)


def sunday_first_weekday(day: date) -> int:
    """Return the weekday with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


def _validate(reminder: Reminder) -> Reminder:
    if not _TIME_PATTERN.match(reminder.time):
        raise ValidationError(f"Reminder time must be HH:MM, got {reminder.time!r}")
    if any(day not in EVERY_DAY for day in reminder.days):
        raise ValidationError("Reminder days must be between 0 (Sunday) and 6")
    return replace(reminder, days=tuple(sorted(set(reminder.days))))


def new_reminder(
    time: str = "08:00", days: tuple[int, ...] = EVERY_DAY, enabled: bool = True
) -> Reminder:
    return _validate(
        Reminder(id=time_based_id(), time=time, days=days, enabled=enabled)
    )


def add_reminder(profile: Profile, reminder: Reminder) -> Profile:
    return replace(profile, reminders=(*profile.reminders, _validate(reminder)))


def update_reminder(profile: Profile, reminder: Reminder) -> Profile:
    """Replace the reminder with the same id."""
    if not any(existing.id == reminder.id for existing in profile.reminders):
        raise ValidationError(f"Unknown reminder: {reminder.id}")
    validated = _validate(reminder)
    return replace(
        profile,
        reminders=tuple(
            validated if existing.id == reminder.id else existing
            for existing in profile.reminders
        ),
    )


def remove_reminder(profile: Profile, reminder_id: str) -> Profile:
    return replace(
        profile,
        reminders=tuple(
            reminder for reminder in profile.reminders if reminder.id != reminder_id
        ),
    )


def toggle_day(profile: Profile, reminder_id: str, day: int) -> Profile:
    """Add or remove one weekday from a reminder."""
    for reminder in profile.reminders:
        if reminder.id == reminder_id:
            days = set(reminder.days)
            days.symmetric_difference_update({day})
            return update_reminder(profile, replace(reminder, days=tuple(days)))
    raise ValidationError(f"Unknown reminder: {reminder_id}")


class Notifier(Protocol):
    """Delivers a reminder notification."""

    async def notify(self, profile: Profile, reminder: Reminder) -> None:
        """Send a notification for a due reminder."""


@dataclass
class LoggingNotifier(Notifier):
    """Notifier that only writes to the application log."""

    async def notify(self, profile: Profile, reminder: Reminder) -> None:
        _logger.info(
            "Time to exercise, %s! (reminder %s at %s)",
            profile.name,
            reminder.id,
            reminder.time,
        )


@dataclass
class ReminderService:
    """Finds reminders due at the current minute and sends them once."""

    profiles: ProfileService
    notifier: Notifier
    tz: tzinfo
    _fired: set[tuple[str, date, str]] = field(default_factory=set, init=False)

    def due(self, now: datetime) -> list[tuple[Profile, Reminder]]:
        """Return reminders due at ``now``, at most one per profile and minute.

        Each ``(profile, day, HH:MM)`` is only reported once, however often
        the check runs within that minute.
        """
        local = now.astimezone(self.tz)
        day = local.date()
        clock = local.strftime("%H:%M")
        weekday = sunday_first_weekday(day)
        self._fired = {key for key in self._fired if key[1] == day}
        due: list[tuple[Profile, Reminder]] = []
        for profile in self.profiles.list_profiles():
            key = (profile.id, day, clock)
            if key in self._fired:
                continue
            for reminder in profile.reminders:
                if (
                    reminder.enabled
                    and reminder.time == clock
                    and weekday in reminder.days
                ):
                    due.append((profile, reminder))
                    self._fired.add(key)
                    break
        return due

    async def check(self, now: datetime | None = None) -> int:
        """Send every due reminder. Returns how many were due."""
        due = self.due(now or datetime.now(tz=UTC))
        for profile, reminder in due:
            try:
                await self.notifier.notify(profile, reminder)
            except Exception:
                _logger.exception(
                    "Failed to send reminder", extra={"profile_id": profile.id}
                )
        return len(due)

    async def run(self, interval_seconds: float) -> None:
        """Poll for due reminders until cancelled."""
        while True:
            await self.check()
            await asyncio.sleep(interval_seconds)
