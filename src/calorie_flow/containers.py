"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_flow.adapters.json_file_store import JsonFileStore
from calorie_flow.adapters.supabase_kv_store import SupabaseKeyValueStore
from calorie_flow.config import Settings, parse_timezone
from calorie_flow.services.tracker import KeyValueStore, TrackerController


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    tracker: TrackerController
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueStore:
    """Create the persistence adapter selected by settings."""
    if settings.storage_backend == "file":
        return JsonFileStore(settings.data_dir)
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage needs supabase_url and service key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client, table=settings.supabase_table)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    tracker = TrackerController(
        store=store,
        timezone=parse_timezone(resolved_settings.timezone),
        goal_adjustment=resolved_settings.goal_adjustment_kcal,
    )

    async def close_resources() -> None:
        await tracker.flush()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        tracker=tracker,
        close_resources=close_resources,
    )
