"""Calorie goal endpoints."""

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, status

from calorie_tracker.api.auth import require_user
from calorie_tracker.api.errors import DOMAIN_ERRORS, to_http_error
from calorie_tracker.api.schemas import (
    CaloriesRequest,
    MacroGoalsRequest,
    SaveGoalRequest,
)
from calorie_tracker.domain.goals import CalorieGoal, goal_to_row
from calorie_tracker.services.calories import calculate
from calorie_tracker.services.goals import GoalService, target_calories

if TYPE_CHECKING:
    from calorie_tracker.containers import AppContainer

router = APIRouter(prefix="/goals", tags=["goals"])


def _goal_service(request: Request) -> GoalService:
    container: AppContainer = request.app.state.container
    return container.goal_service


@router.get("")
async def list_goals(
    user_id: str = Depends(require_user),
    goal_service: GoalService = Depends(_goal_service),
) -> dict[str, object]:
    """Return the user's goals, most recent first."""
    goals = goal_service.load_goals(user_id)
    return {"goals": [goal_payload(goal) for goal in goals]}


@router.get("/current")
async def current_goal(
    user_id: str = Depends(require_user),
    goal_service: GoalService = Depends(_goal_service),
) -> dict[str, object]:
    """Return the user's current goal, if any."""
    goal = goal_service.current_goal(user_id)
    return {"goal": goal_payload(goal) if goal else None}


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_goal(
    body: SaveGoalRequest,
    user_id: str = Depends(require_user),
    goal_service: GoalService = Depends(_goal_service),
) -> dict[str, object]:
    """Calculate calorie levels and save the chosen one as a goal."""
    metrics = body.to_metrics()
    try:
        result = calculate(metrics)
        goal = goal_service.save_calculated_goal(
            user_id, metrics, result, body.goal_type
        )
    except DOMAIN_ERRORS as exc:
        raise to_http_error(exc) from exc
    return {"goal": goal_payload(goal)}


@router.post("/custom", status_code=status.HTTP_201_CREATED)
async def save_custom_goal(
    body: CaloriesRequest,
    user_id: str = Depends(require_user),
    goal_service: GoalService = Depends(_goal_service),
) -> dict[str, object]:
    """Save a goal from a plain calorie number."""
    try:
        goal = goal_service.save_custom_goal(user_id, body.calories)
    except DOMAIN_ERRORS as exc:
        raise to_http_error(exc) from exc
    return {"goal": goal_payload(goal)}


@router.patch("/{goal_id}/calories")
async def edit_calories(
    goal_id: str,
    body: CaloriesRequest,
    user_id: str = Depends(require_user),
    goal_service: GoalService = Depends(_goal_service),
) -> dict[str, object]:
    """Replace a goal's calorie target."""
    try:
        goal = goal_service.get_goal(user_id, goal_id)
        updated = goal_service.edit_calorie_target(goal, body.calories)
    except DOMAIN_ERRORS as exc:
        raise to_http_error(exc) from exc
    return {"goal": goal_payload(updated)}


@router.put("/{goal_id}/macros")
async def set_macros(
    goal_id: str,
    body: MacroGoalsRequest,
    user_id: str = Depends(require_user),
    goal_service: GoalService = Depends(_goal_service),
) -> dict[str, object]:
    """Set or clear a goal's macro targets."""
    try:
        goal = goal_service.get_goal(user_id, goal_id)
        updated = goal_service.set_macro_goals(
            goal, body.protein_goal, body.carbs_goal, body.fat_goal
        )
    except DOMAIN_ERRORS as exc:
        raise to_http_error(exc) from exc
    return {"goal": goal_payload(updated)}


@router.delete("/{goal_id}/macros")
async def clear_macros(
    goal_id: str,
    user_id: str = Depends(require_user),
    goal_service: GoalService = Depends(_goal_service),
) -> dict[str, object]:
    """Remove all macro targets from a goal."""
    try:
        goal = goal_service.get_goal(user_id, goal_id)
        updated = goal_service.clear_macro_goals(goal)
    except DOMAIN_ERRORS as exc:
        raise to_http_error(exc) from exc
    return {"goal": goal_payload(updated)}


def goal_payload(goal: CalorieGoal) -> dict[str, object]:
    """Serialize a goal for API responses."""
    payload = goal_to_row(goal)
    payload["target_calories"] = target_calories(goal)
    return payload
