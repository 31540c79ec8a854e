"""Models for meal analysis webhook results."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ANALYSIS_SCHEMA_VERSION = 1


class AnalysisTotals(BaseModel):
    """Total nutrition for the analyzed meal."""

    model_config = ConfigDict(strict=True)

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)


class FoodItem(BaseModel):
    """Single food line item detected in the meal."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    quantity: str | None = None
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


class MealAnalysis(BaseModel):
    """Validated output of the meal analysis webhook."""

    version: int = ANALYSIS_SCHEMA_VERSION
    status: Literal["success"]
    total: AnalysisTotals
    food: list[FoodItem] = Field(default_factory=list)
