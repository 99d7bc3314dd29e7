"""Supabase-backed key-value storage for tracker state."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calorie_flow.services.tracker import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Supabase implementation using a `key`/`value` table."""

    client: Client
    table: str = "kv_store"

    async def get(self, key: str) -> object | None:
        """Return the stored value for a key, if present."""
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    async def set(self, key: str, value: object) -> None:
        """Insert or replace the value stored under a key."""
        response = (
            self.client.table(self.table)
            .upsert(
                {
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="key",
            )
            .execute()
        )
        if response.data is None:
            raise RuntimeError(f"Failed to store {key} in Supabase")
