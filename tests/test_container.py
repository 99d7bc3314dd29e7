"""Tests for container wiring."""

import asyncio

import pytest

from calorie_flow.adapters.json_file_store import JsonFileStore
from calorie_flow.config import Settings
from calorie_flow.containers import build_container, build_store


def test_build_container_creates_tracker(settings: Settings) -> None:
    container = build_container(settings)

    assert isinstance(container.store, JsonFileStore)
    assert container.tracker.ready is False
    assert container.tracker.goal_adjustment == settings.goal_adjustment_kcal
    asyncio.run(container.close_resources())


def test_supabase_backend_requires_credentials(settings: Settings) -> None:
    settings.storage_backend = "supabase"

    with pytest.raises(ValueError):
        build_store(settings)


def test_unknown_backend_is_rejected(settings: Settings) -> None:
    settings.storage_backend = "floppy"

    with pytest.raises(ValueError):
        build_store(settings)
