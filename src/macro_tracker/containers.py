"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from supabase import create_client

from macro_tracker.adapters.mock_estimate_client import MockEstimateClient
from macro_tracker.adapters.openai_estimate_client import OpenAIEstimateClient
from macro_tracker.adapters.supabase_identity_provider import (
    SupabaseIdentityProvider,
)
from macro_tracker.adapters.supabase_ledger_repository import (
    SupabaseLedgerRepository,
)
from macro_tracker.adapters.supabase_photo_storage import SupabasePhotoStorage
from macro_tracker.config import Settings, daily_goals, resolve_estimate_provider
from macro_tracker.domain.goals import DailyGoals
from macro_tracker.services.estimates import EstimateClient, EstimateService
from macro_tracker.services.history import HistoryService
from macro_tracker.services.identity import IdentityProvider
from macro_tracker.services.ledger import (
    DailyLedgerManager,
    LedgerRepository,
    utc_now,
)
from macro_tracker.services.staging import MealStagingService, PhotoStorage
from macro_tracker.services.tracking import SessionScope, TrackingContext


@dataclass
class AppContainer:
    """Holds application-wide dependencies.

    ``goals`` starts from settings and may be replaced at runtime.
    """

    settings: Settings
    identity_provider: IdentityProvider
    estimate_service: EstimateService
    session_scope: SessionScope
    goals: DailyGoals
    close_resources: Callable[[], Awaitable[None]]


def build_context_factory(  # noqa: PLR0913
    identity: IdentityProvider,
    repository: LedgerRepository,
    estimate_service: EstimateService,
    photo_storage: PhotoStorage,
    timezone_name: str = "UTC",
    auto_commit_seconds: float = 10.0,
    clock: Callable[[], datetime] = utc_now,
) -> Callable[[str], TrackingContext]:
    """Return a factory building the tracking context for a signed-in user.

    The current-day manager, opened history days and staging share one clock,
    so they agree on when the day changes.
    """

    def new_manager() -> DailyLedgerManager:
        return DailyLedgerManager(
            identity=identity,
            repository=repository,
            timezone_name=timezone_name,
            clock=clock,
        )

    def factory(user_id: str) -> TrackingContext:
        manager = new_manager()
        return TrackingContext(
            user_id=user_id,
            ledger=manager,
            history=HistoryService(current=manager, manager_factory=new_manager),
            staging=MealStagingService(
                user_id=user_id,
                manager=manager,
                estimate_service=estimate_service,
                photo_storage=photo_storage,
                auto_commit_seconds=auto_commit_seconds,
                clock=clock,
            ),
        )

    return factory


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )
    identity_provider = SupabaseIdentityProvider(supabase_client)
    ledger_repository = SupabaseLedgerRepository(
        supabase_client, table_name=resolved_settings.ledger_table
    )
    photo_storage = SupabasePhotoStorage(
        supabase_client, bucket=resolved_settings.photo_bucket
    )
    openai_client: OpenAIEstimateClient | None = None
    estimate_client: EstimateClient
    if resolve_estimate_provider(resolved_settings) == "openai":
        openai_client = OpenAIEstimateClient.create(
            resolved_settings.openai_api_key or ""
        )
        estimate_client = openai_client
    else:
        estimate_client = MockEstimateClient()
    estimate_service = EstimateService(
        client=estimate_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    session_scope = SessionScope(
        identity=identity_provider,
        context_factory=build_context_factory(
            identity=identity_provider,
            repository=ledger_repository,
            estimate_service=estimate_service,
            photo_storage=photo_storage,
            timezone_name=resolved_settings.timezone,
            auto_commit_seconds=resolved_settings.auto_commit_seconds,
        ),
    )

    async def close_resources() -> None:
        if session_scope.current is not None:
            await session_scope.current.flush()
        session_scope.stop()
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_provider=identity_provider,
        estimate_service=estimate_service,
        session_scope=session_scope,
        goals=daily_goals(resolved_settings),
        close_resources=close_resources,
    )
