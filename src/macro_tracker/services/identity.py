"""Identity provider boundary."""

from collections.abc import Callable
from typing import Protocol


class IdentityProvider(Protocol):
    """Interface for the external authentication service."""

    def current_user_id(self) -> str | None:
        """Return the signed-in user's id, if any."""

    def on_auth_change(
        self, callback: Callable[[str | None], None]
    ) -> Callable[[], None]:
        """Register a callback for identity changes and return an unsubscriber."""

    def sign_in(self, email: str, password: str) -> str | None:
        """Authenticate with credentials and return the user id on success."""

    def sign_out(self) -> None:
        """End the current session."""
