"""Domain models for derived metrics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Progress:
    """Consumption against the daily target."""

    target: int | float
    consumed: int
    remaining: int
    percent: float
    raw_percent: float | None
    over_target: bool


@dataclass(frozen=True)
class DayCalories:
    """Calories consumed on a day next to the current target."""

    date: str
    calories: int
    target: int | float
