"""Domain models for daily meal ledgers."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime

from macro_tracker.domain.nutrition import DailyTotals, NutrientProfile


@dataclass(frozen=True)
class MealEntry:
    """A committed meal. Never modified after commit."""

    id: str
    name: str
    nutrients: NutrientProfile
    description: str
    created_at: datetime
    has_photo: bool = False
    photo_ref: str | None = None


@dataclass
class DailyLedger:
    """Committed meals and cached totals for one calendar day."""

    date: str
    entries: list[MealEntry] = field(default_factory=list)
    totals: DailyTotals = field(default_factory=DailyTotals)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def empty(cls, day: str, now: datetime) -> "DailyLedger":
        """Return a ledger with no entries and zero totals."""
        return cls(date=day, created_at=now, updated_at=now)

    def find(self, entry_id: str) -> MealEntry | None:
        """Return the entry with the given id, if present."""
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def append(self, entry: MealEntry) -> None:
        """Append an entry and add its nutrients into the totals."""
        self.entries.append(entry)
        self.totals = self.totals.add(entry.nutrients)

    def remove(self, entry_id: str) -> MealEntry | None:
        """Remove an entry and subtract its nutrients, clamping at zero."""
        entry = self.find(entry_id)
        if entry is None:
            return None
        self.totals = self.totals.subtract_clamped(entry.nutrients)
        self.entries = [item for item in self.entries if item.id != entry_id]
        return entry

    def snapshot(self) -> "DailyLedger":
        """Return a copy that later mutations of this ledger do not affect."""
        return replace(self, entries=list(self.entries))


def day_key(value: date | datetime | str) -> str:
    """Return the canonical ``YYYY-MM-DD`` key for a date.

    Raises:
        ValueError: If a string value is not a valid ISO calendar date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    cleaned = value.strip()
    if len(cleaned) != len("YYYY-MM-DD"):
        raise ValueError(f"Invalid day key: {value!r}")
    return date.fromisoformat(cleaned).isoformat()
