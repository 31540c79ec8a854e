"""Domain models for nutrition summaries."""

from dataclasses import dataclass
from enum import StrEnum

from calorie_tracker.domain.goals import GoalType


class GoalStatus(StrEnum):
    """Intake compared to the calorie target."""

    UNDER = "under"
    OVER = "over"
    MET = "met"


@dataclass(frozen=True)
class MacroProgress:
    """Progress of one macro towards its target.

    ``percent`` is the label value and may exceed 100; ``bar_percent`` is
    capped at 100 for progress bar widths.
    """

    actual: float
    target: float
    percent: int
    bar_percent: int


@dataclass(frozen=True)
class MacroEnergySplit:
    """Share of energy from each macro, in whole percent."""

    protein_percent: int
    carbs_percent: int
    fat_percent: int


@dataclass(frozen=True)
class NutritionSummary:
    """Totals for the meals in a time window, optionally compared to a goal."""

    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    meal_count: int
    daily_goal: float | None = None
    goal_type: GoalType | None = None
    goal_status: GoalStatus | None = None
    protein_progress: MacroProgress | None = None
    carbs_progress: MacroProgress | None = None
    fat_progress: MacroProgress | None = None
