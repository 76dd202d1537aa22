"""Pedometer step sync."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime

from getfit.domain.entries import ExerciseEntry
from getfit.domain.errors import ValidationError
from getfit.services.aggregation import local_date
from getfit.services.context import TrackerContext

CALORIES_PER_STEP = 0.04
STEPS_PER_MINUTE = 100

_logger = logging.getLogger(__name__)


def calories_from_steps(steps: int) -> int:
    return round(steps * CALORIES_PER_STEP)


def minutes_from_steps(steps: int) -> int:
    return math.ceil(steps / STEPS_PER_MINUTE)


@dataclass
class StepSyncService:
    """Logs the growth of a monotonically increasing daily step counter."""

    context: TrackerContext
    activity_name: str = "Walking (Steps)"

    def logged_steps(self, day: date) -> int:
        """Return the steps already logged on a local calendar day."""
        exercises = self.context.on_day(self.context.exercises.list(), day)
        return sum(exercise.steps or 0 for exercise in exercises)

    def sync_steps(
        self, total_steps: int, now: datetime | None = None
    ) -> ExerciseEntry | None:
        """Log the steps taken since the last sync today.

        Only the delta over the already logged total is stored, so repeated
        syncs of the same pedometer reading never double count. Returns None
        when the reading adds nothing.
        """
        if total_steps < 0:
            raise ValidationError("Step count cannot be negative")
        moment = now or datetime.now(tz=UTC)
        day = local_date(moment, self.context.tz)
        delta = total_steps - self.logged_steps(day)
        if delta <= 0:
            _logger.info(
                "Ignoring step sync: total=%s already logged for %s", total_steps, day
            )
            return None
        entry = ExerciseEntry(
            name=self.activity_name,
            duration_minutes=minutes_from_steps(delta),
            calories_burned=calories_from_steps(delta),
            steps=delta,
            logged_at=moment,
        )
        return self.context.log_exercise(entry)
