"""Opaque token issuance and hashing for login sessions and reset tokens."""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

_DEFAULT_TOKEN_TTL = timedelta(hours=12)


def hash_opaque_token(token: str) -> str:
    """Return the hex SHA-256 digest persisted in place of a raw token."""

    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IssuedToken:
    """Freshly issued token; only `token_hash` is meant to be stored."""

    token: str
    token_hash: str
    expires_at: datetime


class OpaqueTokenService:
    """Issue random bearer tokens and derive their storage hashes."""

    def __init__(
        self,
        *,
        token_ttl: timedelta = _DEFAULT_TOKEN_TTL,
        token_factory: Callable[[], str] | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._token_ttl = token_ttl
        self._token_factory = token_factory or (lambda: secrets.token_urlsafe(32))
        self._now = now or (lambda: datetime.now(tz=UTC))

    def issue_token(self) -> IssuedToken:
        """Generate one token with its hash and expiry."""

        token = self._token_factory()
        return IssuedToken(
            token=token,
            token_hash=self.hash_token(token),
            expires_at=self._now() + self._token_ttl,
        )

    def hash_token(self, token: str) -> str:
        return hash_opaque_token(token)
