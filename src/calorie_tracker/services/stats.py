"""Nutrition summaries for a user's meal history."""

from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Protocol
from zoneinfo import ZoneInfo

from calorie_tracker.domain.goals import CalorieGoal
from calorie_tracker.domain.meals import MealRecord
from calorie_tracker.domain.stats import (
    GoalStatus,
    MacroEnergySplit,
    MacroProgress,
    NutritionSummary,
)
from calorie_tracker.services.calories import round_half_up
from calorie_tracker.services.goals import GoalService, target_calories

DECEMBER = 12
UNDER_TENTHS = 9
OVER_TENTHS = 11
MAX_BAR_PERCENT = 100
CALORIES_PER_GRAM = {"protein": 4, "carbs": 4, "fat": 9}


class Period(StrEnum):
    """Calendar windows anchored to the current time."""

    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class MealRepository(Protocol):
    """Read interface for saved meals."""

    def list_meals(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[MealRecord]:
        """Return meals in the optional inclusive range, most recent first."""


@dataclass
class StatsService:
    """Service for period summaries compared to the user's current goal."""

    repository: MealRepository
    goal_service: GoalService

    def get_overview(
        self, user_id: str, timezone_name: str, now: datetime | None = None
    ) -> dict[Period, NutritionSummary]:
        """Return day, month and year summaries in the user's timezone."""
        tz = ZoneInfo(timezone_name)
        current = (now or datetime.now(tz=UTC)).astimezone(tz)
        year_start, year_end = period_window(Period.YEAR, current)
        meals = self.repository.list_meals(
            user_id, year_start.astimezone(UTC), year_end.astimezone(UTC)
        )
        goal = self.goal_service.current_goal(user_id)
        overview: dict[Period, NutritionSummary] = {}
        for period in Period:
            start, end = period_window(period, current)
            overview[period] = apply_goal(summarize(meals, start, end), goal)
        return overview


def period_window(period: Period, now: datetime) -> tuple[datetime, datetime]:
    """Return the inclusive start and end of the period containing ``now``."""
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == Period.DAY:
        start = day_start
        end = start + timedelta(days=1)
    elif period == Period.MONTH:
        start = day_start.replace(day=1)
        if start.month == DECEMBER:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
    else:
        start = day_start.replace(month=1, day=1)
        end = start.replace(year=start.year + 1)
    return start, end - timedelta(microseconds=1)


def summarize(
    meals: list[MealRecord], window_start: datetime, window_end: datetime
) -> NutritionSummary:
    """Sum the meals analyzed within the inclusive window."""
    calories = protein = carbs = fat = 0.0
    count = 0
    for meal in meals:
        if not window_start <= meal.analyzed_at <= window_end:
            continue
        calories += meal.calories
        protein += meal.protein
        carbs += meal.carbs
        fat += meal.fat
        count += 1
    return NutritionSummary(
        total_calories=calories,
        total_protein=protein,
        total_carbs=carbs,
        total_fat=fat,
        meal_count=count,
    )


def classify(total_calories: float, goal_calories: float | None) -> GoalStatus | None:
    """Compare intake to a calorie goal with a 10% tolerance band."""
    if not goal_calories or goal_calories <= 0:
        return None
    if total_calories * 10 < goal_calories * UNDER_TENTHS:
        return GoalStatus.UNDER
    if total_calories * 10 > goal_calories * OVER_TENTHS:
        return GoalStatus.OVER
    return GoalStatus.MET


def apply_goal(
    summary: NutritionSummary, goal: CalorieGoal | None
) -> NutritionSummary:
    """Annotate a summary with the goal target, status and macro progress."""
    if goal is None:
        return summary
    goal_calories = target_calories(goal)
    return replace(
        summary,
        daily_goal=goal_calories,
        goal_type=goal.goal_type,
        goal_status=classify(summary.total_calories, goal_calories),
        protein_progress=macro_progress(summary.total_protein, goal.protein_goal),
        carbs_progress=macro_progress(summary.total_carbs, goal.carbs_goal),
        fat_progress=macro_progress(summary.total_fat, goal.fat_goal),
    )


def percent_of(
    actual: float, target: float | None, *, clamp: bool = True
) -> int | None:
    """Return ``actual`` as a whole percentage of ``target``.

    Undefined unless the target is positive. Clamped to 100 for bar widths
    unless ``clamp`` is false.
    """
    if target is None or target <= 0:
        return None
    percent = round_half_up(100 * actual / target)
    if clamp:
        return min(percent, MAX_BAR_PERCENT)
    return percent


def macro_progress(actual: float, target: float | None) -> MacroProgress | None:
    """Return label and bar percentages for a macro target."""
    percent = percent_of(actual, target, clamp=False)
    if percent is None or target is None:
        return None
    return MacroProgress(
        actual=actual,
        target=target,
        percent=percent,
        bar_percent=min(percent, MAX_BAR_PERCENT),
    )


def macro_energy_split(protein: float, carbs: float, fat: float) -> MacroEnergySplit:
    """Return the share of energy from protein, carbs and fat."""
    protein_kcal = protein * CALORIES_PER_GRAM["protein"]
    carbs_kcal = carbs * CALORIES_PER_GRAM["carbs"]
    fat_kcal = fat * CALORIES_PER_GRAM["fat"]
    total = protein_kcal + carbs_kcal + fat_kcal
    if total <= 0:
        return MacroEnergySplit(protein_percent=0, carbs_percent=0, fat_percent=0)
    return MacroEnergySplit(
        protein_percent=round_half_up(100 * protein_kcal / total),
        carbs_percent=round_half_up(100 * carbs_kcal / total),
        fat_percent=round_half_up(100 * fat_kcal / total),
    )
