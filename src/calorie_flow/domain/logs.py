"""Domain models for daily food logs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FoodEntry:
    """A single food item logged on a day."""

    id: str
    name: str
    calories: int
    timestamp: str


@dataclass(frozen=True)
class DailyLog:
    """Everything recorded for one calendar date."""

    date: str
    foods: tuple[FoodEntry, ...] = ()
    total_calories: int = 0
    weight_recorded: float | None = None
    water_intake: int = 0


DailyLogs = dict[str, DailyLog]
