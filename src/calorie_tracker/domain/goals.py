"""Domain models for calorie goals."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

ACTIVITY_MULTIPLIERS: tuple[float, ...] = (1.2, 1.375, 1.55, 1.725, 1.9)


class Gender(StrEnum):
    """Biological sex used by the Mifflin-St Jeor equation."""

    MALE = "male"
    FEMALE = "female"


class UnitSystem(StrEnum):
    """Unit system of weight and height inputs."""

    METRIC = "metric"
    IMPERIAL = "imperial"


class GoalType(StrEnum):
    """Which calorie level a saved goal targets."""

    MAINTENANCE = "maintenance"
    WEIGHT_LOSS = "weight_loss"
    WEIGHT_GAIN = "weight_gain"
    CUSTOM = "custom"


@dataclass(frozen=True)
class BodyMetrics:
    """User supplied body metrics, in the units of ``unit_system``."""

    age: int
    weight: float
    height: float
    gender: Gender
    activity_multiplier: float
    unit_system: UnitSystem = UnitSystem.METRIC


@dataclass(frozen=True)
class CalorieResult:
    """Calorie levels derived from body metrics, in whole kilocalories."""

    bmr: int
    tdee: int
    maintenance: int
    weight_loss: int
    weight_gain: int


@dataclass(frozen=True)
class CalorieGoal:
    """Saved calorie goal with optional macro targets.

    The body metric snapshot is empty for custom goals, which are entered as a
    plain calorie number.
    """

    id: str
    user_id: str
    bmr: float
    tdee: float
    maintenance_calories: float
    weight_loss_calories: float
    weight_gain_calories: float
    goal_type: GoalType
    created_at: datetime
    age: int | None = None
    weight: float | None = None
    height: float | None = None
    gender: Gender | None = None
    activity_level: float | None = None
    unit_system: UnitSystem | None = None
    protein_goal: float | None = None
    carbs_goal: float | None = None
    fat_goal: float | None = None


def goal_to_row(goal: CalorieGoal) -> dict[str, object]:
    """Serialize a goal into a JSON compatible row."""
    return {
        "id": goal.id,
        "user_id": goal.user_id,
        "bmr": goal.bmr,
        "tdee": goal.tdee,
        "maintenance_calories": goal.maintenance_calories,
        "weight_loss_calories": goal.weight_loss_calories,
        "weight_gain_calories": goal.weight_gain_calories,
        "goal_type": goal.goal_type.value,
        "created_at": goal.created_at.isoformat(),
        "age": goal.age,
        "weight": goal.weight,
        "height": goal.height,
        "gender": goal.gender.value if goal.gender else None,
        "activity_level": goal.activity_level,
        "unit_system": goal.unit_system.value if goal.unit_system else None,
        "protein_goal": goal.protein_goal,
        "carbs_goal": goal.carbs_goal,
        "fat_goal": goal.fat_goal,
    }


def goal_from_row(row: dict[str, object]) -> CalorieGoal:
    """Parse a stored row into a goal.

    Legacy rows may carry zeroed metrics or a ``"custom"`` gender and unit
    system; those are read back as an empty snapshot.
    """
    created_at = _parse_timestamp(row.get("created_at"))
    return CalorieGoal(
        id=str(row.get("id") or ""),
        user_id=str(row.get("user_id") or ""),
        bmr=_to_float(row.get("bmr")) or 0.0,
        tdee=_to_float(row.get("tdee")) or 0.0,
        maintenance_calories=_to_float(row.get("maintenance_calories")) or 0.0,
        weight_loss_calories=_to_float(row.get("weight_loss_calories")) or 0.0,
        weight_gain_calories=_to_float(row.get("weight_gain_calories")) or 0.0,
        goal_type=_parse_goal_type(row.get("goal_type")),
        created_at=created_at,
        age=_positive_int(row.get("age")),
        weight=_positive_float(row.get("weight")),
        height=_positive_float(row.get("height")),
        gender=_parse_enum(Gender, row.get("gender")),
        activity_level=_positive_float(row.get("activity_level")),
        unit_system=_parse_enum(UnitSystem, row.get("unit_system")),
        protein_goal=_to_float(row.get("protein_goal")),
        carbs_goal=_to_float(row.get("carbs_goal")),
        fat_goal=_to_float(row.get("fat_goal")),
    )


def _to_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _positive_float(value: object) -> float | None:
    number = _to_float(value)
    if number is None or number <= 0:
        return None
    return number


def _positive_int(value: object) -> int | None:
    number = _positive_float(value)
    return int(number) if number is not None else None


def _parse_goal_type(value: object) -> GoalType:
    parsed = _parse_enum(GoalType, value)
    return parsed or GoalType.MAINTENANCE


def _parse_enum(enum_type: type[StrEnum], value: object) -> StrEnum | None:
    try:
        return enum_type(str(value))
    except ValueError:
        return None


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return datetime.min.replace(tzinfo=UTC)
    else:
        return datetime.min.replace(tzinfo=UTC)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
