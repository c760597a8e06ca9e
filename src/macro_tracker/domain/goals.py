"""Daily nutrient goals, progress against them, and calorie recommendations."""

from dataclasses import dataclass, fields

from macro_tracker.domain.nutrition import DailyTotals

NUTRIENT_UNITS = {
    "calories": "cal",
    "protein": "g",
    "carbs": "g",
    "fat": "g",
    "fiber": "g",
    "sugar": "g",
    "sodium": "mg",
    "vitamins": "%",
}

GENDERS = ("male", "female", "not_specified")
ASSUMED_AGE = 25
DEFAULT_ACTIVITY_FACTOR = 1.4
_CM_PER_INCH = 2.54
_KG_PER_POUND = 0.453592


@dataclass(frozen=True)
class DailyGoals:
    """Target amounts for one day, in the units of ``NUTRIENT_UNITS``."""

    calories: float = 2000.0
    protein: float = 150.0
    carbs: float = 200.0
    fat: float = 65.0
    fiber: float = 25.0
    sugar: float = 50.0
    sodium: float = 2300.0
    vitamins: float = 100.0


@dataclass(frozen=True)
class NutrientProgress:
    """Consumed amount of one nutrient compared with its goal."""

    nutrient: str
    unit: str
    consumed: float
    goal: float
    remaining: float
    percent: float


def progress(totals: DailyTotals, goals: DailyGoals) -> list[NutrientProgress]:
    """Return per-nutrient progress, in ``DailyGoals`` field order.

    ``remaining`` never drops below zero; ``percent`` is uncapped so going over
    a goal shows as more than 100. A zero goal reports 0 percent.
    """
    result = []
    for goal_field in fields(DailyGoals):
        name = goal_field.name
        consumed = getattr(totals, name)
        goal = getattr(goals, name)
        result.append(
            NutrientProgress(
                nutrient=name,
                unit=NUTRIENT_UNITS[name],
                consumed=consumed,
                goal=goal,
                remaining=max(0.0, goal - consumed),
                percent=round(consumed / goal * 100, 1) if goal > 0 else 0.0,
            )
        )
    return result


def estimate_bmr(height_in: float, weight_lb: float, gender: str) -> float:
    """Estimate basal metabolic rate with the Mifflin-St Jeor equation.

    Height is in inches and weight in pounds. Age is fixed at ``ASSUMED_AGE``,
    and ``not_specified`` averages the male and female results.

    Raises:
        ValueError: If height or weight is not positive, or the gender is
            unknown.
    """
    if height_in <= 0 or weight_lb <= 0:
        raise ValueError("height and weight must be positive")
    if gender not in GENDERS:
        raise ValueError(f"Unknown gender: {gender}")
    base = (
        10 * weight_lb * _KG_PER_POUND
        + 6.25 * height_in * _CM_PER_INCH
        - 5 * ASSUMED_AGE
    )
    male = base + 5
    female = base - 161
    if gender == "male":
        return male
    if gender == "female":
        return female
    return (male + female) / 2


def recommended_calories(
    height_in: float,
    weight_lb: float,
    gender: str,
    activity_factor: float = DEFAULT_ACTIVITY_FACTOR,
) -> float:
    """Return daily calories as BMR scaled by an activity factor."""
    return estimate_bmr(height_in, weight_lb, gender) * activity_factor
