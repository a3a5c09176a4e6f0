"""Port for request authentication and login-session lifecycle."""

from __future__ import annotations

from typing import Any, Protocol

from account_lifecycle.application.ports.user_repository_port import UserRecord


class SessionServicePort(Protocol):
    """Session service contract.

    `request` is the transport's per-request session handle; workflows pass it
    through without inspecting it.
    """

    async def is_authenticated(self, request: Any) -> UserRecord | None:
        """Return the authenticated account for the request, or None."""

    async def log_out(self, request: Any, user: UserRecord) -> None:
        """Terminate the request's login session."""

    async def mark_logged_in_after_authentication(self, request: Any, user: UserRecord) -> None:
        """Establish a login session for an account that was just authenticated."""

    def unauthenticated_response(self) -> Any:
        """Build the transport response sent to unauthenticated callers."""
