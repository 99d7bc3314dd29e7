"""Application controller owning the live tracker state."""

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import UTC, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from calorie_flow.domain.backup import BackupDocument, ImportResult, ValidDocument
from calorie_flow.domain.logs import DailyLog, DailyLogs
from calorie_flow.domain.metrics import DayCalories, Progress
from calorie_flow.domain.profile import Profile, default_profile
from calorie_flow.services import backup, metrics
from calorie_flow.services import logs as log_service
from calorie_flow.services.codec import (
    logs_from_dict,
    logs_to_dict,
    profile_from_dict,
    profile_to_dict,
)

STORAGE_KEY_USER = "calorieflow_user"
STORAGE_KEY_LOGS = "calorieflow_logs"

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Persistence port for the profile and log blobs."""

    async def get(self, key: str) -> object | None:
        """Return the stored value for a key, if present."""

    async def set(self, key: str, value: object) -> None:
        """Store a JSON-compatible value under a key."""


class NotReadyError(RuntimeError):
    """Raised when state is mutated before the stored state has loaded."""


class NoPendingImportError(LookupError):
    """Raised when confirming an import that was never staged."""


@dataclass(frozen=True)
class AppState:
    """The live profile and log mapping."""

    profile: Profile
    logs: DailyLogs


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class TrackerController:
    """Applies user actions to the state and schedules persistence writes."""

    store: KeyValueStore
    timezone: ZoneInfo | None = None
    goal_adjustment: int = metrics.GOAL_ADJUSTMENT_KCAL
    clock: Callable[[], datetime] = _utc_now
    state: AppState = field(
        default_factory=lambda: AppState(profile=default_profile(), logs={})
    )
    ready: bool = False
    pending_import: ValidDocument | None = None
    _writes: set[asyncio.Task[None]] = field(default_factory=set, repr=False)

    async def load(self) -> None:
        """Read the stored state; mutations are refused until this completes."""
        stored_user, stored_logs = await asyncio.gather(
            self.store.get(STORAGE_KEY_USER),
            self.store.get(STORAGE_KEY_LOGS),
        )
        profile = self.state.profile
        if isinstance(stored_user, Mapping) and stored_user:
            profile = profile_from_dict(stored_user, profile)
        loaded_logs = logs_from_dict(stored_logs) if stored_logs else {}
        self.state = AppState(profile=profile, logs=loaded_logs)
        self.ready = True
        logger.info("Loaded tracker state with %d daily logs", len(loaded_logs))

    def now(self) -> datetime:
        """Return the current time in the tracker's timezone."""
        return self.clock().astimezone(self.timezone)

    def today(self) -> str:
        """Return today's date key."""
        return self.now().date().isoformat()

    def today_log(self) -> DailyLog:
        """Return today's log, or an empty one when nothing is recorded."""
        day = self.today()
        return self.state.logs.get(day) or DailyLog(date=day)

    def log_for(self, day: str) -> DailyLog | None:
        """Return the log for a date, if one exists."""
        return self.state.logs.get(day)

    def daily_target(self) -> int | float:
        """Return the calorie target for the current profile."""
        return metrics.compute_daily_target(self.state.profile, self.goal_adjustment)

    def progress(self) -> Progress:
        """Return today's progress against the target."""
        return metrics.compute_progress(
            self.daily_target(), self.today_log().total_calories
        )

    def weekly_calories(self) -> list[DayCalories]:
        """Return the last seven days of consumed calories."""
        return metrics.weekly_calories(
            self.state.logs, self.now().date(), self.daily_target()
        )

    def history(self, year: int, month: int) -> list[str]:
        """Return the dates of a month that have a log."""
        return metrics.logged_dates_in_month(self.state.logs, year, month)

    def add_food(self, name: str, calories: int) -> DailyLog:
        """Log a food for today and advance the streak."""
        self._ensure_ready()
        now = self.now()
        day = now.date().isoformat()
        entry = log_service.new_food_entry(name, calories, now)
        updated_logs = log_service.add_food(self.state.logs, day, entry)
        updated_profile = log_service.advance_streak(self.state.profile, now)
        self._commit(profile=updated_profile, logs=updated_logs)
        return updated_logs[day]

    def delete_food(self, food_id: str) -> DailyLog:
        """Remove a food from today's log."""
        self._ensure_ready()
        day = self.today()
        updated_logs = log_service.remove_food(self.state.logs, day, food_id)
        self._commit(logs=updated_logs)
        return updated_logs.get(day) or DailyLog(date=day)

    def update_weight(self, weight_kg: float) -> AppState:
        """Record today's weight on the log and the profile together."""
        self._ensure_ready()
        now = self.now()
        updated_logs, updated_profile = log_service.record_weight(
            self.state.logs,
            self.state.profile,
            now.date().isoformat(),
            weight_kg,
            now,
        )
        self._commit(profile=updated_profile, logs=updated_logs)
        return self.state

    def add_water(self, amount_ml: int) -> DailyLog:
        """Add to today's water intake."""
        self._ensure_ready()
        day = self.today()
        updated_logs = log_service.add_water(self.state.logs, day, amount_ml)
        self._commit(logs=updated_logs)
        return updated_logs[day]

    def update_profile(self, **changes: object) -> Profile:
        """Merge partial profile fields and stamp the update time."""
        self._ensure_ready()
        allowed = {item.name for item in fields(Profile)} - {"updated_at"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        updated = replace(
            self.state.profile,
            **changes,  # type: ignore[arg-type]
            updated_at=self.now().isoformat(),
        )
        self._commit(profile=updated)
        return updated

    def export_snapshot(self) -> BackupDocument:
        """Snapshot the current state for backup."""
        return backup.export_snapshot(self.state.profile, self.state.logs, self.now())

    def import_document(self, raw_text: str) -> ImportResult:
        """Normalize a backup and stage it until the user confirms."""
        result = backup.parse_document(raw_text, now=self.now())
        if isinstance(result, ValidDocument):
            self.pending_import = result
        else:
            logger.warning("Rejected import (%s): %s", result.kind.value, result.reason)
        return result

    def confirm_import(self) -> Profile:
        """Replace the live state with the staged import."""
        self._ensure_ready()
        if self.pending_import is None:
            raise NoPendingImportError("No import is waiting for confirmation")
        document = self.pending_import
        self.pending_import = None
        self._commit(profile=document.profile, logs=document.logs)
        logger.info("Imported backup with %d daily logs", len(document.logs))
        return document.profile

    def cancel_import(self) -> None:
        """Discard a staged import."""
        self.pending_import = None

    async def flush(self) -> None:
        """Wait for all scheduled persistence writes."""
        while self._writes:
            await asyncio.gather(*list(self._writes))

    def _ensure_ready(self) -> None:
        if not self.ready:
            raise NotReadyError("Tracker state is still loading")

    def _commit(
        self, profile: Profile | None = None, logs: DailyLogs | None = None
    ) -> None:
        self.state = AppState(
            profile=profile if profile is not None else self.state.profile,
            logs=logs if logs is not None else self.state.logs,
        )
        if profile is not None:
            self._schedule_write(STORAGE_KEY_USER, profile_to_dict(profile))
        if logs is not None:
            self._schedule_write(STORAGE_KEY_LOGS, logs_to_dict(logs))

    def _schedule_write(self, key: str, value: object) -> None:
        task = asyncio.get_running_loop().create_task(self._write(key, value))
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)

    async def _write(self, key: str, value: object) -> None:
        try:
            await self.store.set(key, value)
        except Exception:
            logger.exception("Failed to persist %s", key)
