"""Daily ledger aggregation and best-effort persistence."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import uuid4
from zoneinfo import ZoneInfo

from macro_tracker.domain.estimates import NutritionEstimate
from macro_tracker.domain.ledger import DailyLedger, MealEntry, day_key
from macro_tracker.services.identity import IdentityProvider

LOAD_ERROR_MESSAGE = "Failed to load daily data"
SAVE_ERROR_MESSAGE = "Failed to save daily data"
LIST_ERROR_MESSAGE = "Failed to load history"

_logger = logging.getLogger(__name__)


class LedgerRepository(Protocol):
    """Persistence interface for per-user daily ledgers."""

    def get_ledger(self, user_id: str, day: str) -> DailyLedger | None:
        """Return the stored ledger for a day, or None if there is none."""

    def save_ledger(self, user_id: str, ledger: DailyLedger) -> None:
        """Upsert the full ledger document for its day."""

    def list_dates(self, user_id: str) -> list[str]:
        """Return the day keys stored for a user."""


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LedgerState:
    """Observable holder for the current ledger and last operation status."""

    ledger: DailyLedger
    is_loading: bool = False
    error_message: str = ""
    _listeners: list[Callable[["LedgerState"], None]] = field(
        default_factory=list, repr=False
    )

    def subscribe(
        self, listener: Callable[["LedgerState"], None]
    ) -> Callable[[], None]:
        """Register a listener called after every change; returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        """Call every registered listener with this state."""
        for listener in list(self._listeners):
            listener(self)


@dataclass
class DailyLedgerManager:
    """Owns one in-memory ledger and keeps its totals reconciled.

    Mutations apply to memory synchronously and schedule a full-ledger upsert
    on a background task. Callers are expected to run on a single event loop,
    so no locking is done here.
    """

    identity: IdentityProvider
    repository: LedgerRepository
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = utc_now
    state: LedgerState = field(init=False)
    last_write: "asyncio.Task[bool] | None" = field(init=False, default=None)
    _pending_writes: "set[asyncio.Task[bool]]" = field(
        init=False, default_factory=set, repr=False
    )
    _follows_today: bool = field(init=False, default=False, repr=False)

    def __post_init__(self) -> None:
        self.state = LedgerState(ledger=DailyLedger.empty(self.today(), self.clock()))

    @property
    def ledger(self) -> DailyLedger:
        """Return the current in-memory ledger."""
        return self.state.ledger

    def today(self) -> str:
        """Return today's day key in the configured timezone."""
        return day_key(self.clock().astimezone(ZoneInfo(self.timezone_name)))

    async def load_day(self, day: date | str) -> DailyLedger | None:
        """Replace the current ledger with the stored one for a day.

        Missing records and read failures both yield an empty ledger; a failure
        additionally sets ``state.error_message``.
        """
        user_id = self.identity.current_user_id()
        if user_id is None:
            _logger.debug("Skipping ledger load: no authenticated user")
            return None
        key = day_key(day)
        self._follows_today = False
        self.state.is_loading = True
        self.state.error_message = ""
        self.state.notify()

        ledger: DailyLedger | None = None
        try:
            ledger = await asyncio.to_thread(self.repository.get_ledger, user_id, key)
        except Exception:
            _logger.exception("Failed to load ledger for %s", key)
            self.state.error_message = LOAD_ERROR_MESSAGE
        if ledger is None:
            ledger = DailyLedger.empty(key, self.clock())

        self.state.ledger = ledger
        self.state.is_loading = False
        self.state.notify()
        return ledger

    async def load_today(self) -> DailyLedger | None:
        """Load today's ledger and keep following the calendar day."""
        ledger = await self.load_day(self.today())
        if ledger is not None:
            self._follows_today = True
        return ledger

    async def roll_over(self) -> bool:
        """Reload today's ledger if the followed day has ended."""
        if not self._follows_today or self.state.ledger.date == self.today():
            return False
        _logger.info("Day changed from %s, reloading", self.state.ledger.date)
        await self.load_today()
        return True

    def add_meal(
        self,
        estimate: NutritionEstimate,
        has_photo: bool = False,
        photo_ref: str | None = None,
    ) -> MealEntry | None:
        """Commit an estimate as a new meal entry and schedule a write."""
        user_id = self.identity.current_user_id()
        if user_id is None:
            _logger.debug("Skipping add_meal: no authenticated user")
            return None
        ledger = self.state.ledger
        now = self._next_timestamp()
        entry = MealEntry(
            id=str(uuid4()),
            name=estimate.name,
            nutrients=estimate.nutrients(),
            description=estimate.description,
            created_at=now,
            has_photo=has_photo,
            photo_ref=photo_ref if has_photo else None,
        )
        ledger.append(entry)
        ledger.updated_at = now
        self.state.notify()
        self._schedule_write(user_id)
        return entry

    def remove_meal(self, entry_id: str) -> MealEntry | None:
        """Remove a meal entry by id; unknown ids are a no-op."""
        user_id = self.identity.current_user_id()
        if user_id is None:
            _logger.debug("Skipping remove_meal: no authenticated user")
            return None
        ledger = self.state.ledger
        removed = ledger.remove(entry_id)
        if removed is None:
            _logger.info("Meal %s not found in %s", entry_id, ledger.date)
            return None
        ledger.updated_at = self.clock()
        self.state.notify()
        self._schedule_write(user_id)
        return removed

    async def list_available_days(self) -> list[str]:
        """Return stored day keys, most recent first."""
        user_id = self.identity.current_user_id()
        if user_id is None:
            _logger.debug("Skipping day listing: no authenticated user")
            return []
        try:
            dates = await asyncio.to_thread(self.repository.list_dates, user_id)
        except Exception:
            _logger.exception("Failed to list ledger days")
            self.state.error_message = LIST_ERROR_MESSAGE
            self.state.notify()
            return []
        return sorted(set(dates), reverse=True)

    async def flush(self) -> None:
        """Wait for every write scheduled so far."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    def _schedule_write(self, user_id: str) -> "asyncio.Task[bool]":
        snapshot = self.state.ledger.snapshot()
        task = asyncio.get_running_loop().create_task(self._write(user_id, snapshot))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)
        self.last_write = task
        return task

    async def _write(self, user_id: str, ledger: DailyLedger) -> bool:
        try:
            await asyncio.to_thread(self.repository.save_ledger, user_id, ledger)
        except Exception:
            _logger.exception("Failed to save ledger for %s", ledger.date)
            self.state.error_message = SAVE_ERROR_MESSAGE
            self.state.notify()
            return False
        _logger.info("Saved ledger %s with %d meals", ledger.date, len(ledger.entries))
        return True

    def _next_timestamp(self) -> datetime:
        now = self.clock()
        entries = self.state.ledger.entries
        if entries and now <= entries[-1].created_at:
            return entries[-1].created_at + timedelta(microseconds=1)
        return now
