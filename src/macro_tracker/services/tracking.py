"""Per-user tracking context and its lifecycle across sign-in changes."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from macro_tracker.services.history import HistoryService
from macro_tracker.services.identity import IdentityProvider
from macro_tracker.services.ledger import DailyLedgerManager
from macro_tracker.services.staging import MealStagingService

_logger = logging.getLogger(__name__)


@dataclass
class TrackingContext:
    """Everything bound to one signed-in user."""

    user_id: str
    ledger: DailyLedgerManager
    history: HistoryService
    staging: MealStagingService

    async def flush(self) -> None:
        """Wait for pending ledger writes, including opened history days."""
        await self.ledger.flush()
        await self.history.flush()

    def close(self) -> None:
        """Stop background work that must not outlive the session."""
        self.staging.cancel_all()


@dataclass
class SessionScope:
    """Owns the current TrackingContext and rebuilds it when identity changes."""

    identity: IdentityProvider
    context_factory: Callable[[str], TrackingContext]
    current: TrackingContext | None = None
    _unsubscribe: Callable[[], None] | None = None

    def start(self) -> None:
        """Build the context for the current user and watch for changes."""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.on_auth_change(self.handle_identity)
        self.handle_identity(self.identity.current_user_id())

    def stop(self) -> None:
        """Stop watching identity changes and close the current context."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._replace(None)

    def handle_identity(self, user_id: str | None) -> None:
        """Swap the context if the signed-in user changed."""
        if self.current is not None and self.current.user_id == user_id:
            return
        if self.current is None and user_id is None:
            return
        _logger.info("Identity changed, rebuilding tracking context")
        self._replace(self.context_factory(user_id) if user_id else None)

    def _replace(self, context: TrackingContext | None) -> None:
        if self.current is not None:
            self.current.close()
        self.current = context
