"""Daily energy target and progress calculations."""

import calendar
import math
from collections.abc import Mapping
from datetime import date, timedelta

from calorie_flow.domain.logs import DailyLog
from calorie_flow.domain.metrics import DayCalories, Progress
from calorie_flow.domain.profile import Gender, GoalType, Profile

GOAL_ADJUSTMENT_KCAL = 1000
MAX_PERCENT = 100.0


def compute_bmr(profile: Profile) -> float:
    """Return basal metabolic rate using the Mifflin-St Jeor equation.

    Formula:
        Men:   10 * weight(kg) + 6.25 * height(cm) - 5 * age + 5
        Women: 10 * weight(kg) + 6.25 * height(cm) - 5 * age - 161
    """
    base = 10 * profile.current_weight + 6.25 * profile.height - 5 * profile.age
    if profile.gender == Gender.FEMALE:
        return base - 161
    return base + 5


def compute_daily_target(
    profile: Profile, goal_adjustment: int = GOAL_ADJUSTMENT_KCAL
) -> int | float:
    """Return the daily calorie target in kcal.

    A positive manual TDEE replaces the formula entirely and is returned as
    stored. The result is not checked for sign.
    """
    if profile.manual_tdee and profile.manual_tdee > 0:
        return profile.manual_tdee

    tdee = compute_bmr(profile) * profile.activity_level
    if profile.goal_type == GoalType.LOSE:
        tdee -= goal_adjustment
    elif profile.goal_type == GoalType.GAIN:
        tdee += goal_adjustment
    return _round_half_up(tdee)


def compute_progress(target: int | float, consumed: int) -> Progress:
    """Return remaining calories and percentage of the target consumed."""
    remaining = target - consumed
    if target <= 0:
        return Progress(
            target=target,
            consumed=consumed,
            remaining=remaining,
            percent=MAX_PERCENT,
            raw_percent=None,
            over_target=True,
        )
    raw_percent = consumed / target * 100
    return Progress(
        target=target,
        consumed=consumed,
        remaining=remaining,
        percent=min(max(raw_percent, 0.0), MAX_PERCENT),
        raw_percent=raw_percent,
        over_target=consumed > target,
    )


def weekly_calories(
    logs: Mapping[str, DailyLog], today: date, target: int | float, days: int = 7
) -> list[DayCalories]:
    """Return consumed calories for the last `days` days, oldest first."""
    series: list[DayCalories] = []
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        log = logs.get(day)
        series.append(
            DayCalories(
                date=day,
                calories=log.total_calories if log else 0,
                target=target,
            )
        )
    return series


def logged_dates_in_month(
    logs: Mapping[str, DailyLog], year: int, month: int
) -> list[str]:
    """Return the dates of a month that have a log, in calendar order."""
    _, days_in_month = calendar.monthrange(year, month)
    dates = (date(year, month, day).isoformat() for day in range(1, days_in_month + 1))
    return [day for day in dates if day in logs]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
