"""Per-request session cookie state handed through lifecycle workflows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fastapi import Request, Response

SESSION_COOKIE_NAME = "account_session"


@dataclass
class WebSession:
    """Incoming session token plus the cookie change the response must carry."""

    incoming_token: str | None
    issued_token: str | None = None
    issued_expires_at: datetime | None = None
    cleared: bool = False

    @classmethod
    def from_request(cls, request: Request) -> WebSession:
        """Read the session cookie from one incoming request."""

        token = request.cookies.get(SESSION_COOKIE_NAME)
        return cls(incoming_token=token.strip() if token and token.strip() else None)

    def establish(self, *, token: str, expires_at: datetime) -> None:
        """Record a newly issued session token to be sent back as a cookie."""

        self.issued_token = token
        self.issued_expires_at = expires_at
        self.cleared = False

    def clear(self) -> None:
        """Record that the session cookie must be removed from the client."""

        self.issued_token = None
        self.issued_expires_at = None
        self.cleared = True

    def write_cookie(self, response: Response, *, secure: bool) -> None:
        """Apply the pending cookie change, if any, to an outgoing response."""

        if self.issued_token is not None and self.issued_expires_at is not None:
            response.set_cookie(
                SESSION_COOKIE_NAME,
                self.issued_token,
                expires=self.issued_expires_at,
                httponly=True,
                secure=secure,
                samesite="lax",
            )
        elif self.cleared:
            response.delete_cookie(SESSION_COOKIE_NAME, httponly=True, secure=secure, samesite="lax")
