"""Supabase Auth identity provider."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from supabase import Client

from macro_tracker.services.identity import IdentityProvider

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Identity provider backed by the Supabase Auth session."""

    client: Client

    def current_user_id(self) -> str | None:
        """Return the id of the user in the active session, if any."""
        session = self.client.auth.get_session()
        if session is None or session.user is None:
            return None
        return str(session.user.id)

    def on_auth_change(
        self, callback: Callable[[str | None], None]
    ) -> Callable[[], None]:
        """Forward Supabase auth state changes as user ids."""

        def _listener(event: object, session: object | None) -> None:
            user = getattr(session, "user", None)
            _logger.debug("Auth state changed: %s", event)
            callback(str(user.id) if user is not None else None)

        subscription = self.client.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe

    def sign_in(self, email: str, password: str) -> str | None:
        """Sign in with email and password and return the user id."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            _logger.warning("Sign-in failed: %s", exc)
            return None
        if response.user is None:
            return None
        return str(response.user.id)

    def sign_out(self) -> None:
        """End the current session."""
        self.client.auth.sign_out()
