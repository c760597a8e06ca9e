from datetime import UTC, date, datetime

import pytest

from macro_tracker.domain.ledger import DailyLedger, MealEntry, day_key
from macro_tracker.domain.nutrition import DailyTotals, NutrientProfile, sum_profiles


def _entry(entry_id: str, **nutrients: float) -> MealEntry:
    return MealEntry(
        id=entry_id,
        name=f"Meal {entry_id}",
        nutrients=NutrientProfile(**nutrients),
        description="",
        created_at=datetime(2024, 1, 1, 9, tzinfo=UTC),
    )


def test_totals_add_leaves_vitamins_untouched() -> None:
    totals = DailyTotals(calories=100, vitamins=12)

    updated = totals.add(NutrientProfile(calories=50, protein=5, sodium=200))

    assert updated.calories == 150
    assert updated.protein == 5
    assert updated.sodium == 200
    assert updated.vitamins == 12


def test_subtract_clamped_floors_each_field() -> None:
    totals = DailyTotals(calories=500, protein=10, fat=3, vitamins=7)

    updated = totals.subtract_clamped(NutrientProfile(calories=200, protein=35))

    assert updated.calories == 300
    assert updated.protein == 0
    assert updated.fat == 3
    assert updated.vitamins == 7


def test_sum_profiles_of_nothing_is_zero() -> None:
    assert sum_profiles([]) == NutrientProfile()


def test_ledger_append_and_remove() -> None:
    ledger = DailyLedger(date="2024-01-01")
    ledger.append(_entry("a", calories=350, protein=35))
    ledger.append(_entry("b", calories=280, protein=22))

    removed = ledger.remove("a")

    assert removed is not None
    assert removed.id == "a"
    assert [entry.id for entry in ledger.entries] == ["b"]
    assert ledger.totals.calories == 280
    assert ledger.totals.protein == 22


def test_ledger_remove_missing_returns_none() -> None:
    ledger = DailyLedger(date="2024-01-01")
    ledger.append(_entry("a", calories=100))

    assert ledger.remove("missing") is None
    assert ledger.totals.calories == 100
    assert len(ledger.entries) == 1


def test_snapshot_is_independent_of_later_appends() -> None:
    ledger = DailyLedger(date="2024-01-01")
    ledger.append(_entry("a", calories=100))

    snapshot = ledger.snapshot()
    ledger.append(_entry("b", calories=50))

    assert len(snapshot.entries) == 1
    assert snapshot.totals.calories == 100


def test_empty_ledger_has_timestamps() -> None:
    now = datetime(2024, 1, 1, 12, tzinfo=UTC)

    ledger = DailyLedger.empty("2024-01-01", now)

    assert ledger.entries == []
    assert ledger.totals == DailyTotals()
    assert ledger.created_at == now
    assert ledger.updated_at == now


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (date(2024, 1, 5), "2024-01-05"),
        (datetime(2024, 1, 5, 23, 30, tzinfo=UTC), "2024-01-05"),
        ("2024-01-05", "2024-01-05"),
        (" 2024-01-05 ", "2024-01-05"),
    ],
)
def test_day_key_accepts_dates_and_strings(value: object, expected: str) -> None:
    assert day_key(value) == expected  # type: ignore[arg-type]


@pytest.mark.parametrize("value", ["2024-13-01", "20240105", "yesterday", ""])
def test_day_key_rejects_invalid_strings(value: str) -> None:
    with pytest.raises(ValueError):
        day_key(value)
