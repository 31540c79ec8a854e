"""Pydantic models for API request bodies."""

from pydantic import BaseModel

from calorie_tracker.domain.goals import BodyMetrics, Gender, GoalType, UnitSystem


class BodyMetricsRequest(BaseModel):
    """Calculator input."""

    age: int
    weight: float
    height: float
    gender: Gender
    activity_level: float = 1.55
    unit_system: UnitSystem = UnitSystem.METRIC

    def to_metrics(self) -> BodyMetrics:
        """Return the domain representation."""
        return BodyMetrics(
            age=self.age,
            weight=self.weight,
            height=self.height,
            gender=self.gender,
            activity_multiplier=self.activity_level,
            unit_system=self.unit_system,
        )


class SaveGoalRequest(BodyMetricsRequest):
    """Calculator input plus the calorie level to save."""

    goal_type: GoalType


class CaloriesRequest(BaseModel):
    """A single calorie target."""

    calories: float


class MacroGoalsRequest(BaseModel):
    """Macro targets in grams; null clears a target."""

    protein_goal: float | None = None
    carbs_goal: float | None = None
    fat_goal: float | None = None
