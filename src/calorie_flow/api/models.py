"""Pydantic models for the HTTP shell."""

from pydantic import BaseModel, ConfigDict, Field

from calorie_flow.domain.profile import ActivityLevel, Gender, GoalType


class FoodCreate(BaseModel):
    """Food entry form payload."""

    name: str = Field(min_length=1)
    calories: int


class WeightUpdate(BaseModel):
    """Weigh-in form payload."""

    weight: float = Field(gt=0, allow_inf_nan=False)


class WaterAdd(BaseModel):
    """Water intake payload."""

    amount_ml: int = Field(alias="amountMl")

    model_config = ConfigDict(populate_by_name=True)


class ProfileUpdate(BaseModel):
    """Partial profile update from the settings screen."""

    name: str | None = None
    gender: Gender | None = None
    age: int | None = None
    height: float | None = None
    current_weight: float | None = Field(default=None, alias="currentWeight")
    target_weight: float | None = Field(default=None, alias="targetWeight")
    activity_level: ActivityLevel | None = Field(default=None, alias="activityLevel")
    goal_type: GoalType | None = Field(default=None, alias="goalType")
    manual_tdee: int | None = Field(default=None, gt=0, alias="manualTDEE")
    water_goal: int | None = Field(default=None, alias="waterGoal")

    model_config = ConfigDict(populate_by_name=True)

    def to_changes(self) -> dict[str, object]:
        """Return the fields the client sent; a null manualTDEE clears it."""
        changes: dict[str, object] = {}
        for key, value in self.model_dump(exclude_unset=True).items():
            if value is None and key != "manual_tdee":
                continue
            changes[key] = value.value if isinstance(value, ActivityLevel) else value
        return changes
