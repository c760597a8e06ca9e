"""Supabase repository for daily ledgers."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from macro_tracker.domain.ledger import DailyLedger, MealEntry
from macro_tracker.domain.nutrition import DailyTotals, NutrientProfile
from macro_tracker.services.ledger import LedgerRepository, utc_now

_LEDGER_COLUMNS = (
    "date, calories_consumed, protein_consumed, carbs_consumed, fat_consumed, "
    "fiber_consumed, sugar_consumed, sodium_consumed, vitamins_consumed, "
    "analyzed_meals, created_at, updated_at"
)


@dataclass
class SupabaseLedgerRepository(LedgerRepository):
    """Supabase implementation storing one row per user and day."""

    client: Client
    table_name: str = "daily_tracking"
    clock: Callable[[], datetime] = utc_now

    def get_ledger(self, user_id: str, day: str) -> DailyLedger | None:
        """Return the ledger row for a day, if present."""
        response = (
            self.client.table(self.table_name)
            .select(_LEDGER_COLUMNS)
            .eq("user_id", user_id)
            .eq("date", day)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_ledger(response.data[0])

    def save_ledger(self, user_id: str, ledger: DailyLedger) -> None:
        """Replace the whole row for the ledger's day."""
        payload = _to_row(user_id, ledger, updated_at=self.clock())
        response = (
            self.client.table(self.table_name)
            .upsert(payload, on_conflict="user_id,date")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save daily ledger")

    def list_dates(self, user_id: str) -> list[str]:
        """Return every stored day key for the user."""
        response = (
            self.client.table(self.table_name)
            .select("date")
            .eq("user_id", user_id)
            .execute()
        )
        return [str(row["date"]) for row in response.data or []]


def _to_row(user_id: str, ledger: DailyLedger, updated_at: datetime) -> dict:
    totals = ledger.totals
    created_at = ledger.created_at or updated_at
    return {
        "user_id": user_id,
        "date": ledger.date,
        "calories_consumed": totals.calories,
        "protein_consumed": totals.protein,
        "carbs_consumed": totals.carbs,
        "fat_consumed": totals.fat,
        "fiber_consumed": totals.fiber,
        "sugar_consumed": totals.sugar,
        "sodium_consumed": totals.sodium,
        "vitamins_consumed": totals.vitamins,
        "analyzed_meals": [_meal_to_json(entry) for entry in ledger.entries],
        "created_at": created_at.isoformat(),
        "updated_at": updated_at.isoformat(),
    }


def _meal_to_json(entry: MealEntry) -> dict[str, object]:
    nutrients = entry.nutrients
    return {
        "id": entry.id,
        "meal_name": entry.name,
        "calories": nutrients.calories,
        "protein": nutrients.protein,
        "carbs": nutrients.carbs,
        "fat": nutrients.fat,
        "fiber": nutrients.fiber,
        "sugar": nutrients.sugar,
        "sodium": nutrients.sodium,
        "description": entry.description,
        "has_photo": entry.has_photo,
        "photo_url": entry.photo_ref,
        "created_at": entry.created_at.isoformat(),
    }


def _parse_ledger(row: dict[str, object]) -> DailyLedger:
    return DailyLedger(
        date=str(row["date"]),
        entries=[_parse_meal(meal) for meal in row.get("analyzed_meals") or []],
        totals=DailyTotals(
            calories=float(row.get("calories_consumed") or 0.0),
            protein=float(row.get("protein_consumed") or 0.0),
            carbs=float(row.get("carbs_consumed") or 0.0),
            fat=float(row.get("fat_consumed") or 0.0),
            fiber=float(row.get("fiber_consumed") or 0.0),
            sugar=float(row.get("sugar_consumed") or 0.0),
            sodium=float(row.get("sodium_consumed") or 0.0),
            vitamins=float(row.get("vitamins_consumed") or 0.0),
        ),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _parse_meal(meal: dict[str, object]) -> MealEntry:
    has_photo = bool(meal.get("has_photo", False))
    photo_url = meal.get("photo_url")
    return MealEntry(
        id=str(meal["id"]),
        name=str(meal.get("meal_name", "")),
        nutrients=NutrientProfile(
            calories=float(meal.get("calories", 0.0)),
            protein=float(meal.get("protein", 0.0)),
            carbs=float(meal.get("carbs", 0.0)),
            fat=float(meal.get("fat", 0.0)),
            fiber=float(meal.get("fiber", 0.0)),
            sugar=float(meal.get("sugar", 0.0)),
            sodium=float(meal.get("sodium", 0.0)),
        ),
        description=str(meal.get("description", "")),
        created_at=_parse_timestamp(meal.get("created_at")) or utc_now(),
        has_photo=has_photo,
        photo_ref=str(photo_url) if has_photo and photo_url else None,
    )


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
