"""Mapping between domain records and their JSON wire shape."""

from collections.abc import Mapping
from enum import Enum

from calorie_flow.domain.logs import DailyLog, DailyLogs, FoodEntry
from calorie_flow.domain.profile import Gender, GoalType, Profile

PROFILE_FIELDS: dict[str, str] = {
    "name": "name",
    "gender": "gender",
    "age": "age",
    "height": "height",
    "currentWeight": "current_weight",
    "targetWeight": "target_weight",
    "activityLevel": "activity_level",
    "goalType": "goal_type",
    "manualTDEE": "manual_tdee",
    "updatedAt": "updated_at",
    "streak": "streak",
    "lastLogTimestamp": "last_log_timestamp",
    "waterGoal": "water_goal",
}


def profile_to_dict(profile: Profile) -> dict[str, object]:
    """Return the wire representation of a profile."""
    payload: dict[str, object] = {}
    for wire_key, attribute in PROFILE_FIELDS.items():
        value = getattr(profile, attribute)
        payload[wire_key] = value.value if isinstance(value, Enum) else value
    return payload


def profile_from_dict(raw: Mapping[str, object], defaults: Profile) -> Profile:
    """Layer the known wire fields of `raw` over `defaults`.

    Values are taken as given; only the enum fields are converted, falling
    back to the default member when the stored token is unknown.
    """
    values: dict[str, object] = {
        attribute: getattr(defaults, attribute) for attribute in PROFILE_FIELDS.values()
    }
    for wire_key, attribute in PROFILE_FIELDS.items():
        if wire_key in raw:
            values[attribute] = raw[wire_key]
    values["gender"] = _to_enum(Gender, values["gender"], defaults.gender)
    values["goal_type"] = _to_enum(GoalType, values["goal_type"], defaults.goal_type)
    return Profile(**values)  # type: ignore[arg-type]


def logs_to_dict(logs: Mapping[str, DailyLog]) -> dict[str, object]:
    """Return the wire representation of the date-to-log mapping."""
    return {day: log_to_dict(log) for day, log in logs.items()}


def logs_from_dict(raw: object) -> DailyLogs:
    """Build the log mapping from its wire shape.

    Field values are installed as given; totals are not recomputed. Raises
    ValueError when the structure itself is not a mapping of log objects.
    """
    if not isinstance(raw, Mapping):
        raise ValueError("logs must be an object keyed by date")
    logs: DailyLogs = {}
    for day, entry in raw.items():
        if not isinstance(entry, Mapping):
            raise ValueError(f"log for {day} must be an object")
        foods = entry.get("foods") or []
        if not isinstance(foods, list):
            raise ValueError(f"foods for {day} must be a list")
        logs[str(day)] = DailyLog(
            date=entry.get("date", day),  # type: ignore[arg-type]
            foods=tuple(_food_from_dict(day, food) for food in foods),
            total_calories=entry.get("totalCalories", 0),  # type: ignore[arg-type]
            weight_recorded=entry.get("weightRecorded"),  # type: ignore[arg-type]
            water_intake=entry.get("waterIntake", 0),  # type: ignore[arg-type]
        )
    return logs


def log_to_dict(log: DailyLog) -> dict[str, object]:
    """Return the wire representation of one daily log."""
    return {
        "date": log.date,
        "foods": [
            {
                "id": food.id,
                "name": food.name,
                "calories": food.calories,
                "timestamp": food.timestamp,
            }
            for food in log.foods
        ],
        "totalCalories": log.total_calories,
        "weightRecorded": log.weight_recorded,
        "waterIntake": log.water_intake,
    }


def _food_from_dict(day: object, raw: object) -> FoodEntry:
    if not isinstance(raw, Mapping):
        raise ValueError(f"food entries for {day} must be objects")
    return FoodEntry(
        id=str(raw.get("id", "")),
        name=raw.get("name", ""),  # type: ignore[arg-type]
        calories=raw.get("calories", 0),  # type: ignore[arg-type]
        timestamp=raw.get("timestamp", ""),  # type: ignore[arg-type]
    )


def _to_enum(enum_type: type[Enum], value: object, fallback: Enum) -> Enum:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except (TypeError, ValueError):
        return fallback
