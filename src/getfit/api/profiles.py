"""Profile and reminder endpoints."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from getfit.api.helpers import get_container, saved
from getfit.api.models import ProfileIn, ReminderIn
from getfit.domain.errors import ValidationError
from getfit.domain.profiles import Profile, Reminder
from getfit.services import reminders
from getfit.services.serialization import profile_to_dict

if TYPE_CHECKING:
    from getfit.containers import AppContainer

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _get_profile(container: AppContainer, profile_id: str) -> Profile:
    profile = container.context.profiles.get(profile_id)
    if profile is None:
        raise ValidationError(f"Unknown profile: {profile_id}")
    return profile


@router.get("")
async def list_profiles(request: Request) -> dict[str, object]:
    """Return all profiles and the active profile id."""
    container = get_container(request)
    return {
        "profiles": [
            profile_to_dict(profile)
            for profile in container.context.profiles.list_profiles()
        ],
        "active_id": container.context.active_profile_id,
    }


@router.post("")
async def add_profile(request: Request) -> dict[str, object]:
    """Create a profile with default fields and switch to it."""
    container = get_container(request)
    profile = container.context.add_profile()
    return saved(container, {"profile": profile_to_dict(profile)})


@router.put("/{profile_id}")
async def update_profile(
    profile_id: str, body: ProfileIn, request: Request
) -> dict[str, object]:
    """Save the profile form; reminders are kept as they are."""
    container = get_container(request)
    current = _get_profile(container, profile_id)
    updated = replace(
        current,
        name=body.name,
        gender=body.gender,
        age=body.age,
        height_cm=body.height_cm,
        target_weight=body.target_weight,
    )
    container.context.update_profile(updated)
    return saved(container, {"profile": profile_to_dict(updated)})


@router.post("/{profile_id}/activate")
async def activate_profile(profile_id: str, request: Request) -> dict[str, object]:
    """Switch the active profile."""
    container = get_container(request)
    profile = container.context.switch_profile(profile_id)
    return saved(container, {"profile": profile_to_dict(profile)})


@router.post("/{profile_id}/reminders")
async def add_reminder(
    profile_id: str, body: ReminderIn, request: Request
) -> dict[str, object]:
    container = get_container(request)
    reminder = reminders.new_reminder(
        time=body.time, days=tuple(body.days), enabled=body.enabled
    )
    profile = reminders.add_reminder(_get_profile(container, profile_id), reminder)
    container.context.update_profile(profile)
    return saved(container, {"profile": profile_to_dict(profile)})


@router.put("/{profile_id}/reminders/{reminder_id}")
async def update_reminder(
    profile_id: str, reminder_id: str, body: ReminderIn, request: Request
) -> dict[str, object]:
    container = get_container(request)
    reminder = Reminder(
        id=reminder_id, time=body.time, days=tuple(body.days), enabled=body.enabled
    )
    profile = reminders.update_reminder(_get_profile(container, profile_id), reminder)
    container.context.update_profile(profile)
    return saved(container, {"profile": profile_to_dict(profile)})


@router.delete("/{profile_id}/reminders/{reminder_id}")
async def remove_reminder(
    profile_id: str, reminder_id: str, request: Request
) -> dict[str, object]:
    container = get_container(request)
    profile = reminders.remove_reminder(
        _get_profile(container, profile_id), reminder_id
    )
    container.context.update_profile(profile)
    return saved(container, {"profile": profile_to_dict(profile)})


@router.post("/{profile_id}/reminders/{reminder_id}/days/{day}")
async def toggle_reminder_day(
    profile_id: str, reminder_id: str, day: int, request: Request
) -> dict[str, object]:
    """Add or remove one weekday (0 = Sunday) from a reminder."""
    container = get_container(request)
    profile = reminders.toggle_day(
        _get_profile(container, profile_id), reminder_id, day
    )
    container.context.update_profile(profile)
    return saved(container, {"profile": profile_to_dict(profile)})
