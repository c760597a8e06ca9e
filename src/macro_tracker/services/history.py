"""Read-mostly access to past daily ledgers."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from macro_tracker.domain.ledger import day_key
from macro_tracker.services.ledger import DailyLedgerManager


@dataclass
class HistoryService:
    """Lists stored days and opens any day in its own ledger manager.

    Opened days are independent of the current-day manager, including when
    the opened day is today. Listing goes through the current-day manager so
    a listing failure shows up in its state.
    """

    current: DailyLedgerManager
    manager_factory: Callable[[], DailyLedgerManager]
    _open_days: dict[str, DailyLedgerManager] = field(default_factory=dict)

    async def list_days(self) -> list[str]:
        """Return stored day keys, most recent first."""
        return await self.current.list_available_days()

    async def open_day(self, day: date | str) -> DailyLedgerManager:
        """Load a day into a fresh manager and keep it for later edits."""
        key = day_key(day)
        previous = self._open_days.get(key)
        if previous is not None:
            await previous.flush()
        manager = self.manager_factory()
        await manager.load_day(key)
        self._open_days[key] = manager
        return manager

    def get_open_day(self, day: date | str) -> DailyLedgerManager | None:
        """Return the manager from the latest open_day call for a day."""
        return self._open_days.get(day_key(day))

    async def flush(self) -> None:
        """Wait for writes scheduled by every opened day."""
        for manager in self._open_days.values():
            await manager.flush()
