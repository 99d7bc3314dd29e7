"""Domain models for the user profile."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum


class Gender(str, Enum):
    """Biological sex used by the energy-expenditure formula."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(float, Enum):
    """Activity multipliers applied to BMR.

    - SEDENTARY: little or no exercise
    - LIGHTLY_ACTIVE: light exercise 1-3 days/week
    - MODERATELY_ACTIVE: moderate exercise 3-5 days/week
    - VERY_ACTIVE: hard exercise 6-7 days/week
    - EXTRA_ACTIVE: very hard exercise and a physical job
    """

    SEDENTARY = 1.2
    LIGHTLY_ACTIVE = 1.375
    MODERATELY_ACTIVE = 1.55
    VERY_ACTIVE = 1.725
    EXTRA_ACTIVE = 1.9


class GoalType(str, Enum):
    """Weight goal selecting the calorie adjustment."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


DEFAULT_NAME = "Guest"
DEFAULT_WATER_GOAL_ML = 2000


@dataclass(frozen=True)
class Profile:
    """The single user profile of an installation."""

    name: str
    gender: Gender
    age: int | float
    height: float
    current_weight: float
    target_weight: float
    activity_level: float
    goal_type: GoalType
    updated_at: str
    manual_tdee: int | float | None = None
    streak: int = 0
    last_log_timestamp: str | None = None
    water_goal: int = DEFAULT_WATER_GOAL_ML


def default_profile(now: datetime | None = None) -> Profile:
    """Return the profile created on first launch."""
    stamp = now or datetime.now(tz=UTC)
    return Profile(
        name=DEFAULT_NAME,
        gender=Gender.MALE,
        age=25,
        height=170,
        current_weight=70,
        target_weight=65,
        activity_level=ActivityLevel.SEDENTARY.value,
        goal_type=GoalType.LOSE,
        updated_at=stamp.isoformat(),
    )
