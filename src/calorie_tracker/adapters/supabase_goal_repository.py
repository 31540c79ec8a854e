"""Supabase repository for calorie goals."""

from dataclasses import dataclass

from supabase import Client

from calorie_tracker.domain.errors import RemoteUnavailableError
from calorie_tracker.domain.goals import CalorieGoal, goal_from_row, goal_to_row
from calorie_tracker.services.goals import GoalRepository

_TABLE = "calorie_goals"


@dataclass
class SupabaseGoalRepository(GoalRepository):
    """Supabase implementation for calorie goals."""

    client: Client

    def upsert_goal(self, goal: CalorieGoal) -> None:
        """Insert or replace a goal row."""
        try:
            response = self.client.table(_TABLE).upsert(goal_to_row(goal)).execute()
        except Exception as exc:
            raise RemoteUnavailableError(f"Goal upsert failed: {exc}") from exc
        if not response.data:
            raise RemoteUnavailableError("Goal upsert returned no rows")

    def update_goal(self, goal_id: str, fields: dict[str, object]) -> None:
        """Update selected goal columns."""
        try:
            response = (
                self.client.table(_TABLE).update(fields).eq("id", goal_id).execute()
            )
        except Exception as exc:
            raise RemoteUnavailableError(f"Goal update failed: {exc}") from exc
        if not response.data:
            raise RemoteUnavailableError(f"Goal update matched no rows: {goal_id}")

    def list_goals(self, user_id: str) -> list[CalorieGoal]:
        """Return a user's goals, most recent first."""
        try:
            response = (
                self.client.table(_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            raise RemoteUnavailableError(f"Goal query failed: {exc}") from exc
        return [goal_from_row(row) for row in response.data or []]
