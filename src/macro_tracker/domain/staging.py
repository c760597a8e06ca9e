"""Domain models for staged meals."""

from dataclasses import dataclass
from datetime import datetime

from macro_tracker.domain.estimates import NutritionEstimate
from macro_tracker.domain.ledger import MealEntry

PENDING = "PENDING"
COMMITTED = "COMMITTED"
REJECTED = "REJECTED"


@dataclass(frozen=True)
class StoredPhoto:
    """Location of an uploaded meal photo."""

    path: str
    url: str


@dataclass
class StagedMeal:
    """Estimate awaiting acceptance, rejection, or auto-commit."""

    id: str
    estimate: NutritionEstimate
    staged_at: datetime
    has_photo: bool = False
    photo: StoredPhoto | None = None
    status: str = PENDING
    entry: MealEntry | None = None
    committed_by: str | None = None
