"""Calorie needs based on the Mifflin-St Jeor equation."""

import math

from calorie_tracker.domain.errors import InvalidInputError
from calorie_tracker.domain.goals import (
    ACTIVITY_MULTIPLIERS,
    BodyMetrics,
    CalorieResult,
    Gender,
    UnitSystem,
)
from calorie_tracker.services.units import to_metric

CALORIE_ADJUSTMENT = 500
_MALE_OFFSET = 5
_FEMALE_OFFSET = -161


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)


def compute_bmr(age: int, weight_kg: float, height_cm: float, gender: Gender) -> float:
    """Return the basal metabolic rate in kcal/day."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == Gender.MALE:
        return base + _MALE_OFFSET
    return base + _FEMALE_OFFSET


def compute_goals(bmr: float, activity_multiplier: float) -> CalorieResult:
    """Derive TDEE and the maintenance, loss and gain calorie levels."""
    tdee = round_half_up(bmr * activity_multiplier)
    return CalorieResult(
        bmr=round_half_up(bmr),
        tdee=tdee,
        maintenance=tdee,
        weight_loss=tdee - CALORIE_ADJUSTMENT,
        weight_gain=tdee + CALORIE_ADJUSTMENT,
    )


def validate_metrics(metrics: BodyMetrics) -> None:
    """Reject metrics the equation cannot produce a sensible result for."""
    values = (
        metrics.age,
        metrics.weight,
        metrics.height,
        metrics.activity_multiplier,
    )
    if not all(math.isfinite(value) for value in values):
        raise InvalidInputError("Body metrics must be finite numbers")
    if metrics.age < 1 or metrics.weight < 1 or metrics.height < 1:
        raise InvalidInputError("Age, weight and height must be at least 1")
    if metrics.activity_multiplier not in ACTIVITY_MULTIPLIERS:
        raise InvalidInputError(
            f"Unsupported activity multiplier: {metrics.activity_multiplier}"
        )
    if not isinstance(metrics.gender, Gender):
        raise InvalidInputError(f"Unsupported gender: {metrics.gender}")
    if not isinstance(metrics.unit_system, UnitSystem):
        raise InvalidInputError(f"Unsupported unit system: {metrics.unit_system}")


def calculate(metrics: BodyMetrics) -> CalorieResult:
    """Compute calorie levels for user supplied metrics.

    The activity multiplier is applied to the unrounded BMR; only the
    reported values are rounded.
    """
    validate_metrics(metrics)
    weight_kg, height_cm = to_metric(
        metrics.weight, metrics.height, metrics.unit_system
    )
    bmr = compute_bmr(metrics.age, weight_kg, height_cm, metrics.gender)
    return compute_goals(bmr, metrics.activity_multiplier)
