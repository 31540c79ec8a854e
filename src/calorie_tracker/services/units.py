"""Imperial to metric conversion for body metrics."""

from calorie_tracker.domain.errors import InvalidInputError
from calorie_tracker.domain.goals import UnitSystem

KG_PER_POUND = 0.453592
CM_PER_INCH = 2.54


def to_metric(
    weight: float, height: float, unit_system: UnitSystem
) -> tuple[float, float]:
    """Return ``(weight_kg, height_cm)`` for inputs in ``unit_system``."""
    if weight <= 0 or height <= 0:
        raise InvalidInputError("Weight and height must be positive")
    if unit_system == UnitSystem.IMPERIAL:
        return weight * KG_PER_POUND, height * CM_PER_INCH
    return weight, height
