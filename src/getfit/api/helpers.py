"""Shared helpers for API routers."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from getfit.containers import AppContainer

SAVE_WARNING = "Changes could not be saved to storage."


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def saved(container: AppContainer, payload: dict[str, object]) -> dict[str, object]:
    """Flush pending changes and flag the payload when persisting failed."""
    if not container.context.flush():
        payload["warning"] = SAVE_WARNING
    return payload


def as_aware(value: datetime, tz: tzinfo) -> datetime:
    """Interpret naive timestamps in the tracker's timezone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value
