"""Pydantic request and response models for the HTTP API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from macro_tracker.domain.estimates import NutritionEstimate


class NutrientsView(BaseModel):
    """Nutrient amounts of a meal."""

    model_config = ConfigDict(from_attributes=True)

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float
    sugar: float
    sodium: float


class TotalsView(NutrientsView):
    """Daily totals including the manually tracked vitamins field."""

    vitamins: float


class MealEntryView(BaseModel):
    """Committed meal entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    nutrients: NutrientsView
    description: str
    has_photo: bool
    photo_ref: str | None
    created_at: datetime


class NutrientProgressView(BaseModel):
    """Consumed amount of one nutrient against its goal."""

    model_config = ConfigDict(from_attributes=True)

    nutrient: str
    unit: str
    consumed: float
    goal: float
    remaining: float
    percent: float


class LedgerView(BaseModel):
    """One day's ledger with progress toward the daily goals."""

    model_config = ConfigDict(from_attributes=True)

    date: str
    entries: list[MealEntryView]
    totals: TotalsView
    created_at: datetime | None
    updated_at: datetime | None
    progress: list[NutrientProgressView] = Field(default_factory=list)


class GoalsView(BaseModel):
    """Daily nutrient goals."""

    model_config = ConfigDict(from_attributes=True)

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float
    sugar: float
    sodium: float
    vitamins: float


class UpdateGoalsRequest(BaseModel):
    """Goals to change; omitted nutrients keep their current goal."""

    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)
    vitamins: float | None = Field(default=None, ge=0)


class CalorieGoalRequest(BaseModel):
    """Body measurements for a recommended calorie goal."""

    height_in: float = Field(gt=0)
    weight_lb: float = Field(gt=0)
    gender: Literal["male", "female", "not_specified"] = "not_specified"
    activity_factor: float = Field(default=1.4, gt=0)


class CalorieGoalView(BaseModel):
    """Recommended calories and the goals after applying them."""

    bmr: float
    calories: float
    goals: GoalsView


class StatusView(BaseModel):
    """Status of the most recent ledger operation."""

    model_config = ConfigDict(from_attributes=True)

    is_loading: bool
    error_message: str


class DaysView(BaseModel):
    """Stored day keys, most recent first."""

    days: list[str]


class StagedMealView(BaseModel):
    """Staged estimate awaiting a decision."""

    id: str
    status: str
    estimate: NutritionEstimate
    has_photo: bool
    photo_url: str | None
    staged_at: datetime
    committed_by: str | None
    entry: MealEntryView | None


class AddMealRequest(BaseModel):
    """Commit an estimate directly."""

    estimate: NutritionEstimate
    has_photo: bool = False
    photo_ref: str | None = None


class LoadDayRequest(BaseModel):
    """Switch the current ledger to another day."""

    date: str


class DescribeMealRequest(BaseModel):
    """Free-text meal description to estimate."""

    description: str = Field(max_length=2000)

    @field_validator("description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value


class SignInRequest(BaseModel):
    """Email and password credentials."""

    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class SignInResponse(BaseModel):
    """Signed-in user and their current ledger."""

    user_id: str
    ledger: LedgerView | None
