"""Nutrition domain models."""

from dataclasses import dataclass

NUTRIENT_FIELDS = ("calories", "protein", "carbs", "fat", "fiber", "sugar", "sodium")


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient amounts for a single meal."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0


@dataclass(frozen=True)
class DailyTotals:
    """Cached per-day aggregate of committed meal nutrients.

    ``vitamins`` is carried alongside the ledger-derived fields but is never
    changed by :meth:`add` or :meth:`subtract_clamped`.
    """

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0
    vitamins: float = 0.0

    def add(self, profile: NutrientProfile) -> "DailyTotals":
        """Return totals with the profile added element-wise."""
        return DailyTotals(
            calories=self.calories + profile.calories,
            protein=self.protein + profile.protein,
            carbs=self.carbs + profile.carbs,
            fat=self.fat + profile.fat,
            fiber=self.fiber + profile.fiber,
            sugar=self.sugar + profile.sugar,
            sodium=self.sodium + profile.sodium,
            vitamins=self.vitamins,
        )

    def subtract_clamped(self, profile: NutrientProfile) -> "DailyTotals":
        """Return totals with the profile subtracted, each field floored at zero."""
        return DailyTotals(
            calories=max(0.0, self.calories - profile.calories),
            protein=max(0.0, self.protein - profile.protein),
            carbs=max(0.0, self.carbs - profile.carbs),
            fat=max(0.0, self.fat - profile.fat),
            fiber=max(0.0, self.fiber - profile.fiber),
            sugar=max(0.0, self.sugar - profile.sugar),
            sodium=max(0.0, self.sodium - profile.sodium),
            vitamins=self.vitamins,
        )


def sum_profiles(profiles: list[NutrientProfile]) -> NutrientProfile:
    """Return the element-wise sum of nutrient profiles."""
    total = NutrientProfile()
    for profile in profiles:
        total = NutrientProfile(
            calories=total.calories + profile.calories,
            protein=total.protein + profile.protein,
            carbs=total.carbs + profile.carbs,
            fat=total.fat + profile.fat,
            fiber=total.fiber + profile.fiber,
            sugar=total.sugar + profile.sugar,
            sodium=total.sodium + profile.sodium,
        )
    return total
