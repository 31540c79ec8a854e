"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from calorie_tracker.adapters.supabase_auth import UserResolver
from calorie_tracker.config import Settings
from calorie_tracker.containers import AppContainer
from calorie_tracker.domain.analysis import MealAnalysis
from calorie_tracker.domain.errors import RemoteUnavailableError
from calorie_tracker.domain.goals import CalorieGoal, GoalType
from calorie_tracker.domain.meals import MealRecord, StoredImage
from calorie_tracker.services.goals import GoalRepository, GoalService, LocalGoalStore
from calorie_tracker.services.meals import (
    ImageStorage,
    MealAnalysisClient,
    MealHistoryRepository,
    MealService,
)
from calorie_tracker.services.stats import StatsService

USER_ID = "user-1"
TOKEN = "valid-token"


@dataclass
class InMemoryGoalRepository(GoalRepository):
    """In-memory remote goal repository that can simulate outages."""

    goals: dict[str, CalorieGoal] = field(default_factory=dict)
    updates: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    available: bool = True

    def upsert_goal(self, goal: CalorieGoal) -> None:
        self._check()
        self.goals[goal.id] = goal

    def update_goal(self, goal_id: str, fields: dict[str, object]) -> None:
        self._check()
        current = self.goals.get(goal_id)
        if current is None:
            raise RemoteUnavailableError(f"no remote goal {goal_id}")
        self.updates.append((goal_id, fields))
        values = {
            key: GoalType(value) if key == "goal_type" else value
            for key, value in fields.items()
        }
        self.goals[goal_id] = replace(current, **values)

    def list_goals(self, user_id: str) -> list[CalorieGoal]:
        self._check()
        return sorted(
            (goal for goal in self.goals.values() if goal.user_id == user_id),
            key=lambda goal: goal.created_at,
            reverse=True,
        )

    def _check(self) -> None:
        if not self.available:
            raise RemoteUnavailableError("remote store offline")


@dataclass
class InMemoryLocalGoalStore(LocalGoalStore):
    """In-memory local goal list."""

    goals: list[CalorieGoal] = field(default_factory=list)
    writable: bool = True
    readable: bool = True

    def load(self) -> list[CalorieGoal]:
        if not self.readable:
            raise ValueError("local store is corrupt")
        return list(self.goals)

    def store(self, goals: list[CalorieGoal]) -> None:
        if not self.writable:
            raise OSError("local store is read-only")
        self.goals = list(goals)


@dataclass
class InMemoryMealRepository(MealHistoryRepository):
    """In-memory meal history."""

    meals: list[MealRecord] = field(default_factory=list)

    def create_meal(
        self, user_id: str, image_url: str, analysis: MealAnalysis
    ) -> MealRecord:
        meal = MealRecord(
            id=str(uuid4()),
            user_id=user_id,
            image_url=image_url,
            calories=analysis.total.calories,
            protein=analysis.total.protein,
            carbs=analysis.total.carbs,
            fat=analysis.total.fat,
            analyzed_at=datetime.now(tz=UTC),
            food_items=[item.model_dump(exclude_none=True) for item in analysis.food],
        )
        self.meals.append(meal)
        return meal

    def list_meals(self, user_id: str, start=None, end=None) -> list[MealRecord]:
        meals = [
            meal
            for meal in self.meals
            if meal.user_id == user_id
            and (start is None or meal.analyzed_at >= start)
            and (end is None or meal.analyzed_at <= end)
        ]
        return sorted(meals, key=lambda meal: meal.analyzed_at, reverse=True)


@dataclass
class FakeImageStorage(ImageStorage):
    """Records uploads and returns a predictable public URL."""

    uploads: dict[str, tuple[bytes, str]] = field(default_factory=dict)

    def upload(self, path: str, content: bytes, content_type: str) -> StoredImage:
        self.uploads[path] = (content, content_type)
        return StoredImage(path=path, public_url=f"https://cdn.test/{path}")


@dataclass
class FakeAnalysisClient(MealAnalysisClient):
    """Fake webhook client returning a fixed payload."""

    payload: object = field(
        default_factory=lambda: [
            {
                "output": {
                    "status": "success",
                    "total": {
                        "calories": 650,
                        "protein": 35,
                        "carbs": 70,
                        "fat": 20,
                    },
                    "food": [
                        {
                            "name": "grilled chicken",
                            "quantity": "150g",
                            "calories": 250,
                            "protein": 30,
                            "carbs": 0,
                            "fat": 8,
                        },
                        {
                            "name": "rice",
                            "quantity": "1 cup",
                            "calories": 400,
                            "protein": 5,
                            "carbs": 70,
                            "fat": 12,
                        },
                    ],
                }
            }
        ]
    )
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def analyze(
        self, image_bytes: bytes, filename: str, content_type: str
    ) -> object:
        self.calls.append((filename, content_type))
        return self.payload


@dataclass
class FakeUserResolver(UserResolver):
    """Maps fixed tokens to user ids."""

    tokens: dict[str, str] = field(default_factory=lambda: {TOKEN: USER_ID})

    def resolve(self, access_token: str) -> str | None:
        return self.tokens.get(access_token)


def make_goal(  # noqa: PLR0913
    goal_id: str = "g1",
    user_id: str = USER_ID,
    maintenance: float = 2000,
    weight_loss: float = 1500,
    weight_gain: float = 2500,
    goal_type: GoalType = GoalType.MAINTENANCE,
    created_at: datetime | None = None,
    **extra: object,
) -> CalorieGoal:
    """Build a goal with sensible defaults."""
    return CalorieGoal(
        id=goal_id,
        user_id=user_id,
        bmr=1600,
        tdee=maintenance,
        maintenance_calories=maintenance,
        weight_loss_calories=weight_loss,
        weight_gain_calories=weight_gain,
        goal_type=goal_type,
        created_at=created_at or datetime(2025, 1, 1, tzinfo=UTC),
        **extra,
    )


def make_meal(
    calories: float,
    analyzed_at: datetime,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
    user_id: str = USER_ID,
) -> MealRecord:
    """Build a saved meal."""
    return MealRecord(
        id=str(uuid4()),
        user_id=user_id,
        image_url="https://cdn.test/meal.jpg",
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        analyzed_at=analyzed_at,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        meal_analysis_webhook_url="https://hooks.test/ai-meal",
        local_goals_path=str(tmp_path / "goals.json"),
    )


@pytest.fixture
def goal_repository() -> InMemoryGoalRepository:
    return InMemoryGoalRepository()


@pytest.fixture
def local_store() -> InMemoryLocalGoalStore:
    return InMemoryLocalGoalStore()


@pytest.fixture
def goal_service(
    goal_repository: InMemoryGoalRepository, local_store: InMemoryLocalGoalStore
) -> GoalService:
    return GoalService(repository=goal_repository, local_store=local_store)


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def image_storage() -> FakeImageStorage:
    return FakeImageStorage()


@pytest.fixture
def meal_service(
    analysis_client: FakeAnalysisClient,
    image_storage: FakeImageStorage,
    meal_repository: InMemoryMealRepository,
) -> MealService:
    return MealService(
        analysis_client=analysis_client,
        image_storage=image_storage,
        repository=meal_repository,
    )


@pytest.fixture
def container(
    settings: Settings,
    goal_service: GoalService,
    meal_service: MealService,
    meal_repository: InMemoryMealRepository,
) -> AppContainer:
    stats_service = StatsService(repository=meal_repository, goal_service=goal_service)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        user_resolver=FakeUserResolver(),
        goal_service=goal_service,
        meal_service=meal_service,
        stats_service=stats_service,
        close_resources=close_resources,
    )
