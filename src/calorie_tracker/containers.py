"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from calorie_tracker.adapters.json_goal_store import JsonFileGoalStore
from calorie_tracker.adapters.supabase_auth import SupabaseUserResolver, UserResolver
from calorie_tracker.adapters.supabase_goal_repository import SupabaseGoalRepository
from calorie_tracker.adapters.supabase_image_storage import SupabaseImageStorage
from calorie_tracker.adapters.supabase_meal_repository import SupabaseMealRepository
from calorie_tracker.adapters.webhook_analysis_client import HttpxMealAnalysisClient
from calorie_tracker.config import Settings
from calorie_tracker.services.goals import GoalService
from calorie_tracker.services.meals import MealService
from calorie_tracker.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_resolver: UserResolver
    goal_service: GoalService
    meal_service: MealService
    stats_service: StatsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    goal_service = GoalService(
        repository=SupabaseGoalRepository(supabase_client),
        local_store=JsonFileGoalStore(Path(resolved_settings.local_goals_path)),
    )
    meal_repository = SupabaseMealRepository(supabase_client)
    analysis_client = HttpxMealAnalysisClient.create(
        webhook_url=resolved_settings.meal_analysis_webhook_url,
        timeout_seconds=resolved_settings.meal_analysis_timeout_seconds,
    )
    meal_service = MealService(
        analysis_client=analysis_client,
        image_storage=SupabaseImageStorage(
            supabase_client, bucket=resolved_settings.meal_images_bucket
        ),
        repository=meal_repository,
        max_upload_bytes=resolved_settings.max_upload_bytes,
    )
    stats_service = StatsService(
        repository=meal_repository,
        goal_service=goal_service,
    )

    async def close_resources() -> None:
        await analysis_client.close()

    return AppContainer(
        settings=resolved_settings,
        user_resolver=SupabaseUserResolver(supabase_client),
        goal_service=goal_service,
        meal_service=meal_service,
        stats_service=stats_service,
        close_resources=close_resources,
    )
