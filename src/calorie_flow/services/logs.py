"""State transitions for daily logs.

Every function here is pure: it takes the current log mapping (and profile
where relevant) and returns new values without touching its inputs.
"""

from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from calorie_flow.domain.logs import DailyLog, DailyLogs, FoodEntry
from calorie_flow.domain.profile import Profile


def new_food_entry(
    name: str, calories: int, now: datetime | None = None
) -> FoodEntry:
    """Create a food entry; the name must not be blank."""
    if not name or not name.strip():
        raise ValueError("Food name must not be empty")
    stamp = now or datetime.now(tz=UTC)
    return FoodEntry(
        id=str(uuid4()),
        name=name,
        calories=calories,
        timestamp=stamp.isoformat(),
    )


def add_food(logs: Mapping[str, DailyLog], day: str, entry: FoodEntry) -> DailyLogs:
    """Append an entry to the day's log, creating the log if needed."""
    log = _get_or_empty(logs, day)
    updated = replace(
        log,
        foods=(*log.foods, entry),
        total_calories=log.total_calories + entry.calories,
    )
    return {**logs, day: updated}


def remove_food(
    logs: Mapping[str, DailyLog], day: str, food_id: str
) -> DailyLogs:
    """Drop an entry by id and recompute the day's total from scratch."""
    log = logs.get(day)
    if log is None:
        return dict(logs)
    foods = tuple(food for food in log.foods if food.id != food_id)
    updated = replace(log, foods=foods, total_calories=sum_calories(foods))
    return {**logs, day: updated}


def record_weight(
    logs: Mapping[str, DailyLog],
    profile: Profile,
    day: str,
    weight_kg: float,
    now: datetime | None = None,
) -> tuple[DailyLogs, Profile]:
    """Record a weigh-in on the day's log and as the profile's current weight."""
    stamp = now or datetime.now(tz=UTC)
    log = _get_or_empty(logs, day)
    updated_logs = {**logs, day: replace(log, weight_recorded=weight_kg)}
    updated_profile = replace(
        profile, current_weight=weight_kg, updated_at=stamp.isoformat()
    )
    return updated_logs, updated_profile


def add_water(logs: Mapping[str, DailyLog], day: str, amount_ml: int) -> DailyLogs:
    """Add to the water intake of the day's log."""
    log = _get_or_empty(logs, day)
    return {**logs, day: replace(log, water_intake=log.water_intake + amount_ml)}


def advance_streak(profile: Profile, now: datetime) -> Profile:
    """Update the logging streak for a log action made at `now`.

    `now` must carry the timezone whose calendar days define the streak.
    """
    last_day = _parse_day(profile.last_log_timestamp, now)
    previous = profile.streak if _is_count(profile.streak) else 0
    today = now.date()
    if last_day == today:
        streak = max(previous, 1)
    elif last_day == today - timedelta(days=1):
        streak = previous + 1
    else:
        streak = 1
    return replace(profile, streak=streak, last_log_timestamp=now.isoformat())


def sum_calories(foods: tuple[FoodEntry, ...]) -> int:
    """Return the calorie sum of a sequence of entries."""
    return sum(food.calories for food in foods)


def _get_or_empty(logs: Mapping[str, DailyLog], day: str) -> DailyLog:
    return logs.get(day) or DailyLog(date=day)


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_day(timestamp: object, now: datetime) -> date | None:
    if not isinstance(timestamp, str) or not timestamp:
        return None
    try:
        parsed = datetime.fromisoformat(timestamp)
    except ValueError:
        return None
    if parsed.tzinfo is not None and now.tzinfo is not None:
        parsed = parsed.astimezone(now.tzinfo)
    return parsed.date()
