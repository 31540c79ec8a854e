"""Calorie goal storage with a local fallback."""

import logging
import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from calorie_tracker.domain.errors import (
    GoalNotFoundError,
    InvalidInputError,
    SaveFailedError,
)
from calorie_tracker.domain.goals import (
    BodyMetrics,
    CalorieGoal,
    CalorieResult,
    GoalType,
)

_logger = logging.getLogger(__name__)

_MUTABLE_FIELDS = frozenset(
    {
        "weight_loss_calories",
        "weight_gain_calories",
        "goal_type",
        "protein_goal",
        "carbs_goal",
        "fat_goal",
    }
)


class GoalRepository(Protocol):
    """Remote persistence interface for calorie goals."""

    def upsert_goal(self, goal: CalorieGoal) -> None:
        """Insert a goal, replacing any existing goal with the same id."""

    def update_goal(self, goal_id: str, fields: dict[str, object]) -> None:
        """Update selected fields of a goal."""

    def list_goals(self, user_id: str) -> list[CalorieGoal]:
        """Return a user's goals, most recent first."""


class LocalGoalStore(Protocol):
    """Device-local list of goals used when the remote store is unreachable."""

    def load(self) -> list[CalorieGoal]:
        """Return every goal in the local list."""

    def store(self, goals: list[CalorieGoal]) -> None:
        """Replace the local list."""


@dataclass
class GoalService:
    """Saves and loads calorie goals.

    The remote repository is authoritative whenever it is reachable. Writes
    that fail remotely land in the local store and are flushed to the remote
    repository on the next successful read for the same user.
    """

    repository: GoalRepository
    local_store: LocalGoalStore

    def save(self, goal: CalorieGoal) -> CalorieGoal:
        """Persist a new goal remotely, falling back to the local store."""
        try:
            self.repository.upsert_goal(goal)
        except Exception as remote_exc:
            _logger.warning(
                "Remote goal save failed, using local store: goal_id=%s error=%s",
                goal.id,
                remote_exc,
            )
            try:
                goals = self.local_store.load()
                goals.append(goal)
                self.local_store.store(goals)
            except Exception as local_exc:
                raise SaveFailedError(
                    f"Failed to save goal {goal.id}: {remote_exc}"
                ) from local_exc
        return goal

    def update(self, goal: CalorieGoal, fields: dict[str, object]) -> CalorieGoal:
        """Apply partial changes to a goal and persist them."""
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"Fields cannot be updated: {sorted(unknown)}")
        updated = replace(goal, **fields)
        try:
            self.repository.update_goal(goal.id, _serialize_fields(fields))
        except Exception as remote_exc:
            _logger.warning(
                "Remote goal update failed, using local store: goal_id=%s error=%s",
                goal.id,
                remote_exc,
            )
            try:
                self._merge_local(updated, fields)
            except Exception as local_exc:
                raise SaveFailedError(
                    f"Failed to update goal {goal.id}: {remote_exc}"
                ) from local_exc
        return updated

    def load_goals(self, user_id: str) -> list[CalorieGoal]:
        """Return a user's goals, most recent first."""
        try:
            remote_goals = self.repository.list_goals(user_id)
        except Exception as exc:
            _logger.warning(
                "Remote goal load failed, using local store: user_id=%s error=%s",
                user_id,
                exc,
            )
            try:
                local_goals = self.local_store.load()
            except Exception:
                _logger.exception("Failed to read local goals: user_id=%s", user_id)
                return []
            return _sort_recent_first(
                [goal for goal in local_goals if goal.user_id == user_id]
            )

        local_goals = self._flush_pending(user_id)
        merged = {goal.id: goal for goal in remote_goals}
        for goal in local_goals:
            merged[goal.id] = goal
        return _sort_recent_first(list(merged.values()))

    def current_goal(self, user_id: str) -> CalorieGoal | None:
        """Return the user's most recent valid goal."""
        return select_current(self.load_goals(user_id))

    def get_goal(self, user_id: str, goal_id: str) -> CalorieGoal:
        """Return a goal owned by the user."""
        for goal in self.load_goals(user_id):
            if goal.id == goal_id:
                return goal
        raise GoalNotFoundError(goal_id)

    def save_calculated_goal(
        self,
        user_id: str,
        metrics: BodyMetrics,
        result: CalorieResult,
        goal_type: GoalType,
    ) -> CalorieGoal:
        """Save a calculator result as the user's goal."""
        if goal_type == GoalType.CUSTOM:
            raise InvalidInputError("Calculated goals cannot be custom")
        goal = CalorieGoal(
            id=_new_goal_id(),
            user_id=user_id,
            bmr=result.bmr,
            tdee=result.tdee,
            maintenance_calories=result.maintenance,
            weight_loss_calories=result.weight_loss,
            weight_gain_calories=result.weight_gain,
            goal_type=goal_type,
            created_at=datetime.now(tz=UTC),
            age=metrics.age,
            weight=metrics.weight,
            height=metrics.height,
            gender=metrics.gender,
            activity_level=metrics.activity_multiplier,
            unit_system=metrics.unit_system,
        )
        return self.save(goal)

    def save_custom_goal(self, user_id: str, calories: float) -> CalorieGoal:
        """Save a goal entered as a plain calorie number."""
        _require_positive(calories, "Calorie goal")
        goal = CalorieGoal(
            id=_new_goal_id(),
            user_id=user_id,
            bmr=0.0,
            tdee=0.0,
            maintenance_calories=calories,
            weight_loss_calories=calories,
            weight_gain_calories=calories,
            goal_type=GoalType.CUSTOM,
            created_at=datetime.now(tz=UTC),
        )
        return self.save(goal)

    def edit_calorie_target(self, goal: CalorieGoal, calories: float) -> CalorieGoal:
        """Replace the target calories of a goal, marking it custom.

        Maintenance calories are left untouched; the loss and gain levels both
        take the new value so rows written by earlier clients stay readable.
        """
        _require_positive(calories, "Calorie goal")
        return self.update(
            goal,
            {
                "weight_loss_calories": calories,
                "weight_gain_calories": calories,
                "goal_type": GoalType.CUSTOM,
            },
        )

    def set_macro_goals(
        self,
        goal: CalorieGoal,
        protein_goal: float | None,
        carbs_goal: float | None,
        fat_goal: float | None,
    ) -> CalorieGoal:
        """Set or clear the protein, carbs and fat targets in grams."""
        for label, value in (
            ("Protein goal", protein_goal),
            ("Carbs goal", carbs_goal),
            ("Fat goal", fat_goal),
        ):
            if value is not None:
                _require_positive(value, label)
        return self.update(
            goal,
            {
                "protein_goal": protein_goal,
                "carbs_goal": carbs_goal,
                "fat_goal": fat_goal,
            },
        )

    def clear_macro_goals(self, goal: CalorieGoal) -> CalorieGoal:
        """Remove all macro targets from a goal."""
        return self.set_macro_goals(goal, None, None, None)

    def _merge_local(self, updated: CalorieGoal, fields: dict[str, object]) -> None:
        goals = self.local_store.load()
        for index, goal in enumerate(goals):
            if goal.id == updated.id:
                goals[index] = replace(goal, **fields)
                break
        else:
            goals.append(updated)
        self.local_store.store(goals)

    def _flush_pending(self, user_id: str) -> list[CalorieGoal]:
        """Push the user's local goals to the remote repository.

        Returns every local goal of the user, flushed or not.
        """
        try:
            local_goals = self.local_store.load()
        except Exception:
            _logger.exception("Failed to read local goals for flush")
            return []
        pending = [goal for goal in local_goals if goal.user_id == user_id]
        if not pending:
            return []

        flushed: set[str] = set()
        for goal in pending:
            try:
                self.repository.upsert_goal(goal)
            except Exception as exc:
                _logger.warning(
                    "Pending goal flush failed: goal_id=%s error=%s", goal.id, exc
                )
                continue
            flushed.add(goal.id)

        if flushed:
            remaining = [
                goal
                for goal in local_goals
                if not (goal.user_id == user_id and goal.id in flushed)
            ]
            try:
                self.local_store.store(remaining)
            except Exception:
                _logger.exception("Failed to prune flushed local goals")
            _logger.info(
                "Flushed pending goals: user_id=%s count=%s", user_id, len(flushed)
            )
        return pending


def select_current(goals: list[CalorieGoal]) -> CalorieGoal | None:
    """Return the first goal with an id and positive maintenance calories.

    ``goals`` must be ordered most recent first.
    """
    for goal in goals:
        if goal.id and goal.maintenance_calories > 0:
            return goal
    return None


def target_calories(goal: CalorieGoal) -> float:
    """Return the calorie target a goal tracks against."""
    if goal.goal_type == GoalType.MAINTENANCE:
        return goal.maintenance_calories
    if goal.goal_type == GoalType.WEIGHT_LOSS:
        return goal.weight_loss_calories
    return goal.weight_gain_calories


def _sort_recent_first(goals: list[CalorieGoal]) -> list[CalorieGoal]:
    return sorted(goals, key=lambda goal: goal.created_at, reverse=True)


def _serialize_fields(fields: dict[str, object]) -> dict[str, object]:
    return {
        key: value.value if isinstance(value, GoalType) else value
        for key, value in fields.items()
    }


def _require_positive(value: float, label: str) -> None:
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{label} must be a positive number")


def _new_goal_id() -> str:
    return str(uuid4())
