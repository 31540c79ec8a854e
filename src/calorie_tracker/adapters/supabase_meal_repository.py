"""Supabase repository for saved meal analyses."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calorie_tracker.domain.analysis import MealAnalysis
from calorie_tracker.domain.meals import MealRecord
from calorie_tracker.services.meals import MealHistoryRepository

_TABLE = "meal_analyses"


@dataclass
class SupabaseMealRepository(MealHistoryRepository):
    """Supabase implementation for meal history."""

    client: Client

    def create_meal(
        self, user_id: str, image_url: str, analysis: MealAnalysis
    ) -> MealRecord:
        """Insert a meal analysis row."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "user_id": user_id,
                    "image_url": image_url,
                    "calories": analysis.total.calories,
                    "protein": analysis.total.protein,
                    "carbs": analysis.total.carbs,
                    "fat": analysis.total.fat,
                    "food_items": [
                        item.model_dump(exclude_none=True) for item in analysis.food
                    ],
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal analysis")
        return _parse_row(response.data[0])

    def list_meals(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[MealRecord]:
        """Return meals in the optional inclusive range, most recent first."""
        query = self.client.table(_TABLE).select("*").eq("user_id", user_id)
        if start is not None:
            query = query.gte("analyzed_at", start.isoformat())
        if end is not None:
            query = query.lte("analyzed_at", end.isoformat())
        response = query.order("analyzed_at", desc=True).execute()
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> MealRecord:
    analyzed_raw = row.get("analyzed_at")
    analyzed_at = (
        datetime.fromisoformat(analyzed_raw)
        if isinstance(analyzed_raw, str) and analyzed_raw
        else datetime.min
    )
    if analyzed_at.tzinfo is None:
        analyzed_at = analyzed_at.replace(tzinfo=UTC)
    food_items = row.get("food_items")
    return MealRecord(
        id=str(row.get("id", "")),
        user_id=str(row.get("user_id", "")),
        image_url=str(row.get("image_url", "")),
        calories=float(row.get("calories") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        analyzed_at=analyzed_at,
        food_items=food_items if isinstance(food_items, list) else [],
    )
