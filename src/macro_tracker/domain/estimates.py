"""Models for nutrition estimate results."""

from pydantic import BaseModel, Field

from macro_tracker.domain.nutrition import NutrientProfile


class NutritionEstimate(BaseModel):
    """Structured macro estimate for a described or photographed meal."""

    name: str = Field(min_length=1)
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    fiber: float = Field(default=0.0, ge=0.0)
    sugar: float = Field(default=0.0, ge=0.0)
    sodium: float = Field(default=0.0, ge=0.0)
    description: str = ""

    def nutrients(self) -> NutrientProfile:
        """Return the estimate's nutrient amounts."""
        return NutrientProfile(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            fiber=self.fiber,
            sugar=self.sugar,
            sodium=self.sodium,
        )
