import asyncio

from macro_tracker.domain.ledger import DailyLedger
from macro_tracker.services.history import HistoryService
from macro_tracker.services.ledger import LIST_ERROR_MESSAGE, DailyLedgerManager
from tests.conftest import (
    USER_ID,
    FakeClock,
    FakeIdentityProvider,
    InMemoryLedgerRepository,
    chicken_salad,
    make_manager,
    turkey_sandwich,
)


def _history(repository: InMemoryLedgerRepository) -> HistoryService:
    identity = FakeIdentityProvider()
    clock = FakeClock()

    def factory() -> DailyLedgerManager:
        return make_manager(repository=repository, identity=identity, clock=clock)

    return HistoryService(current=factory(), manager_factory=factory)


def test_list_days_most_recent_first() -> None:
    repository = InMemoryLedgerRepository()
    for day in ("2023-12-30", "2024-01-01", "2023-12-31"):
        repository.ledgers[(USER_ID, day)] = DailyLedger(date=day)

    days = asyncio.run(_history(repository).list_days())

    assert days == ["2024-01-01", "2023-12-31", "2023-12-30"]


def test_open_day_edits_persist_to_that_day() -> None:
    repository = InMemoryLedgerRepository()
    history = _history(repository)

    async def scenario() -> DailyLedgerManager:
        manager = await history.open_day("2023-12-30")
        manager.add_meal(chicken_salad())
        await manager.flush()
        return manager

    manager = asyncio.run(scenario())

    assert manager.ledger.date == "2023-12-30"
    assert history.get_open_day("2023-12-30") is manager
    stored = repository.ledgers[(USER_ID, "2023-12-30")]
    assert stored.totals.calories == 350


def test_reopening_a_day_replaces_the_manager() -> None:
    repository = InMemoryLedgerRepository()
    history = _history(repository)

    async def scenario() -> tuple[DailyLedgerManager, DailyLedgerManager]:
        first = await history.open_day("2023-12-30")
        first.add_meal(chicken_salad())
        second = await history.open_day("2023-12-30")
        return first, second

    first, second = asyncio.run(scenario())

    assert first is not second
    assert history.get_open_day("2023-12-30") is second
    assert [entry.name for entry in second.ledger.entries] == ["Chicken salad"]


def test_open_day_is_independent_of_current_manager() -> None:
    repository = InMemoryLedgerRepository()
    identity = FakeIdentityProvider()
    clock = FakeClock()

    def factory() -> DailyLedgerManager:
        return make_manager(repository=repository, identity=identity, clock=clock)

    current = factory()
    history = HistoryService(current=current, manager_factory=factory)

    async def scenario() -> DailyLedgerManager:
        await current.load_today()
        opened = await history.open_day(current.today())
        opened.add_meal(turkey_sandwich())
        await opened.flush()
        return opened

    opened = asyncio.run(scenario())

    assert opened.ledger.date == current.ledger.date
    assert len(opened.ledger.entries) == 1
    assert current.ledger.entries == []


def test_get_open_day_unknown_returns_none() -> None:
    history = _history(InMemoryLedgerRepository())

    assert history.get_open_day("2024-01-01") is None


def test_flush_waits_for_every_opened_day() -> None:
    repository = InMemoryLedgerRepository()
    history = _history(repository)

    async def scenario() -> None:
        for day in ("2023-12-29", "2023-12-30"):
            manager = await history.open_day(day)
            manager.add_meal(chicken_salad())
        await history.flush()

    asyncio.run(scenario())

    assert sorted(day for _, day, _ in repository.saves) == [
        "2023-12-29",
        "2023-12-30",
    ]


def test_list_failure_is_reported_on_current_day_state() -> None:
    repository = InMemoryLedgerRepository(fail_lists=True)
    history = _history(repository)

    days = asyncio.run(history.list_days())

    assert days == []
    assert history.current.state.error_message == LIST_ERROR_MESSAGE
