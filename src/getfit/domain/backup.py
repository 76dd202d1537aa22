"""Models for backup export and import."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class BackupMeta(BaseModel):
    """Metadata stored alongside exported keys."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = "Unknown"
    timestamp: str | None = None
    platform: str | None = None
    entry_count: int | None = Field(default=None, alias="entryCount")


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a backup import."""

    imported: int
    meta: BackupMeta | None
