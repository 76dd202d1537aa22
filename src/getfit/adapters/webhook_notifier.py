"""HTTP webhook notifier for exercise reminders."""

from dataclasses import dataclass

import httpx

from getfit.domain.profiles import Profile, Reminder
from getfit.services.reminders import Notifier


@dataclass
class HttpxWebhookNotifier(Notifier):
    """Posts reminder notifications to a webhook URL."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxWebhookNotifier":
        """Create a notifier with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def notify(self, profile: Profile, reminder: Reminder) -> None:
        """Send the reminder as a JSON message."""
        payload: dict[str, object] = {
            "title": "Time to exercise!",
            "body": f"{profile.name}, your {reminder.time} workout is due.",
            "profile_id": profile.id,
            "reminder_id": reminder.id,
        }
        response = await self.http_client.post(self.url, json=payload, timeout=10)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
