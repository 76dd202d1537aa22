"""Supabase table backed key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from getfit.domain.errors import PersistenceError
from getfit.services.storage import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores keys as rows of a ``(key, value)`` table."""

    client: Client
    table: str = "kv_store"

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        try:
            response = (
                self.client.table(self.table)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise PersistenceError(f"Failed to read {key} from Supabase") from exc
        if not response.data:
            return None
        return response.data[0].get("value")

    def set(self, key: str, value: str) -> None:
        """Insert or replace the row for a key."""
        try:
            self.client.table(self.table).upsert(
                {
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            ).execute()
        except Exception as exc:
            raise PersistenceError(f"Failed to write {key} to Supabase") from exc

    def delete(self, key: str) -> None:
        """Delete the row for a key."""
        try:
            self.client.table(self.table).delete().eq("key", key).execute()
        except Exception as exc:
            raise PersistenceError(f"Failed to delete {key} from Supabase") from exc

    def keys(self) -> list[str]:
        """Return every stored key."""
        try:
            response = (
                self.client.table(self.table).select("key").order("key").execute()
            )
        except Exception as exc:
            raise PersistenceError("Failed to list Supabase keys") from exc
        return [str(row["key"]) for row in response.data or []]
