"""Domain models for saved meals."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MealRecord:
    """A meal analysis saved to a user's history."""

    id: str
    user_id: str
    image_url: str
    calories: float
    protein: float
    carbs: float
    fat: float
    analyzed_at: datetime
    food_items: list[dict[str, object]] = field(default_factory=list)


@dataclass(frozen=True)
class StoredImage:
    """Location of an uploaded meal image."""

    path: str
    public_url: str
