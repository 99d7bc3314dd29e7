"""Shared test fixtures."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from calorie_flow.config import Settings
from calorie_flow.containers import AppContainer
from calorie_flow.domain.profile import Profile, default_profile
from calorie_flow.services.tracker import KeyValueStore, TrackerController

FIXED_NOW = datetime(2026, 10, 16, 8, 30, tzinfo=UTC)
TODAY = "2026-10-16"


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    data: dict[str, object] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)
    fail_writes: bool = False

    async def get(self, key: str) -> object | None:
        value = self.data.get(key)
        return json.loads(json.dumps(value)) if value is not None else None

    async def set(self, key: str, value: object) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes.append(key)
        self.data[key] = json.loads(json.dumps(value))


def fixed_clock(now: datetime = FIXED_NOW) -> Callable[[], datetime]:
    return lambda: now


def make_profile(**overrides: object) -> Profile:
    return replace(default_profile(FIXED_NOW), **overrides)  # type: ignore[arg-type]


def make_controller(
    store: InMemoryKeyValueStore | None = None,
    now: datetime = FIXED_NOW,
) -> TrackerController:
    return TrackerController(
        store=store or InMemoryKeyValueStore(),
        timezone=ZoneInfo("UTC"),
        clock=fixed_clock(now),
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        storage_backend="file",
        data_dir=tmp_path / "data",
        timezone="UTC",
    )


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def controller(store: InMemoryKeyValueStore) -> TrackerController:
    return make_controller(store)


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryKeyValueStore,
    controller: TrackerController,
) -> AppContainer:
    async def close_resources() -> None:
        await controller.flush()

    return AppContainer(
        settings=settings,
        store=store,
        tracker=controller,
        close_resources=close_resources,
    )
